"""HTTP client for the hosted document store (Supavec API).

Uploads files and text, lists uploaded files, and runs similarity searches
restricted to a set of file ids. All httpx failures are translated to the
error taxonomy here so nothing transport-specific leaks upward.
"""

import logging
from pathlib import Path
from typing import Any

import httpx

from docchat.errors import UpstreamError, UpstreamTimeout

logger = logging.getLogger(__name__)


def response_detail(response: httpx.Response) -> Any:
    """Best-effort diagnostic body of an upstream response."""
    try:
        return response.json()
    except ValueError:
        return response.text or None


class DocumentStoreClient:
    """Thin async wrapper over the document store endpoints.

    Args:
        base_url: API base URL, without trailing slash.
        api_key: Value sent in the ``authorization`` header.
        timeout: Seconds allowed per request.
        client: Optional httpx client (for testing with mocks).
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, endpoint: str, **kwargs: Any) -> Any:
        """POST to an endpoint and return the decoded JSON body.

        Raises:
            UpstreamTimeout: The store did not answer within the timeout.
            UpstreamError: Non-2xx status, network failure or non-JSON body.
        """
        url = f"{self._base_url}/{endpoint}"
        try:
            response = await self._client.post(
                url, headers={"authorization": self._api_key}, **kwargs
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error(f"Document store request to {endpoint} timed out: {e}")
            raise UpstreamTimeout(
                "The document service took too long to respond", details=str(e)
            ) from e
        except httpx.HTTPStatusError as e:
            detail = response_detail(e.response)
            logger.error(
                f"Document store request to {endpoint} failed with "
                f"HTTP {e.response.status_code}: {detail}"
            )
            raise UpstreamError("The document service rejected the request", details=detail) from e
        except httpx.RequestError as e:
            logger.error(f"Document store request to {endpoint} failed: {e}")
            raise UpstreamError("Could not reach the document service", details=str(e)) from e

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Document store returned malformed JSON from {endpoint}")
            raise UpstreamError(
                "The document service returned an unreadable response",
                details=response.text,
            ) from e

    async def upload_file(self, path: Path, filename: str, content_type: str) -> Any:
        """Forward a file on disk as multipart field ``file``."""
        with path.open("rb") as fh:
            return await self._request(
                "upload_file", files={"file": (filename, fh, content_type)}
            )

    async def upload_text(self, name: str, contents: str) -> Any:
        return await self._request("upload_text", json={"name": name, "contents": contents})

    async def user_files(self, limit: int, offset: int, order_dir: str) -> Any:
        return await self._request(
            "user_files",
            json={
                "pagination": {"limit": limit, "offset": offset},
                "order_dir": order_dir,
            },
        )

    async def embeddings(self, query: str, file_ids: list[str], k: int) -> Any:
        return await self._request(
            "embeddings", json={"query": query, "file_ids": file_ids, "k": k}
        )
