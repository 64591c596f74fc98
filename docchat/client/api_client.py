"""Async client for the gateway's /api routes, used by the UI.

Error bodies (``{error, kind, details?}``) are turned back into the
matching GatewayError subclass, so callers see the same taxonomy whether
they talk to the gateway in-process or over HTTP.
"""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from docchat.config import ALLOWED_MIME_TYPES, ClientConfig, get_client_config
from docchat.errors import (
    UnsupportedType,
    UpstreamError,
    UpstreamTimeout,
    error_for_kind,
)
from docchat.gateway import normalize_mime
from docchat.models.schemas import (
    ChatCompletion,
    ContextChunk,
    DocumentReference,
    FileListResponse,
    SearchResponse,
)
from docchat.upstream.document_store import response_detail

logger = logging.getLogger(__name__)


class ApiClient:
    """HTTP client for the DocChat gateway.

    Args:
        config: Optional client configuration. Loads from environment if
            not provided.
        client: Optional httpx client (for testing with ASGI or mock transports).
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or get_client_config()
        self._client = client or httpx.AsyncClient(timeout=self._config.timeout)

    @property
    def page_size(self) -> int:
        return self._config.page_size

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self._config.api_base_url}{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"API request {method} {path} timed out: {e}")
            raise UpstreamTimeout("The server took too long to respond", details=str(e)) from e
        except httpx.RequestError as e:
            logger.error(f"API request {method} {path} failed: {e}")
            raise UpstreamError("Could not reach the server", details=str(e)) from e

        if response.is_error:
            body = response_detail(response)
            kind = message = details = None
            if isinstance(body, dict):
                kind = body.get("kind")
                message = body.get("error")
                details = body.get("details")
            error_class = error_for_kind(kind, response.status_code)
            logger.error(f"API Error: {method} {path} -> HTTP {response.status_code}: {body!r}")
            raise error_class(message or "API request failed", details=details)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError("The server returned an unreadable response") from e

    @staticmethod
    def _parse(model: type, payload: Any) -> Any:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise UpstreamError("The server returned an unexpected response", details=payload) from e

    async def upload_file(
        self, content: bytes, filename: str, content_type: str | None
    ) -> DocumentReference:
        """Upload a PDF or text file.

        The type is checked locally first so obviously wrong files never
        leave the browser session.

        Raises:
            UnsupportedType: Not a PDF or plain text file.
            GatewayError: The gateway rejected or failed the upload.
        """
        if normalize_mime(content_type) not in ALLOWED_MIME_TYPES:
            raise UnsupportedType("Please select a PDF or text file")

        payload = await self._request(
            "POST", "/upload", files={"file": (filename, content, content_type)}
        )
        return self._parse(DocumentReference, payload)

    async def upload_text(self, name: str, contents: str) -> DocumentReference:
        payload = await self._request(
            "POST", "/upload-text", json={"name": name, "contents": contents}
        )
        return self._parse(DocumentReference, payload)

    async def list_files(
        self,
        offset: int = 0,
        limit: int | None = None,
        order_dir: str = "desc",
    ) -> list[DocumentReference]:
        """Fetch one page of the file list."""
        params = {
            "offset": offset,
            "limit": limit or self._config.page_size,
            "order_dir": order_dir,
        }
        payload = await self._request("GET", "/files", params=params)
        return self._parse(FileListResponse, payload).results

    async def search(self, query: str, file_ids: list[str], k: int = 3) -> list[ContextChunk]:
        """Search the selected files.

        Returns:
            Chunks ranked in the order the gateway returned them.
        """
        payload = await self._request(
            "POST", "/search", json={"query": query, "file_ids": file_ids, "k": k}
        )
        if isinstance(payload, dict) and isinstance(payload.get("documents"), list):
            payload = {
                "documents": [
                    {**doc, "rank": rank} if isinstance(doc, dict) else doc
                    for rank, doc in enumerate(payload["documents"], start=1)
                ]
            }
        return self._parse(SearchResponse, payload).documents

    async def ask(self, question: str, context: str) -> str:
        """Ask a question grounded in ``context`` and return the answer text."""
        payload = await self._request(
            "POST", "/ask", json={"question": question, "context": context}
        )
        return self._parse(ChatCompletion, payload).answer
