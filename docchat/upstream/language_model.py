"""HTTP client for the hosted language model (OpenAI-compatible chat completions)."""

import logging
from typing import Any

import httpx

from docchat.errors import GenerationFailed
from docchat.upstream.document_store import response_detail

logger = logging.getLogger(__name__)


class LanguageModelClient:
    """Single round-trip chat completions, no streaming and no retries.

    Every failure, timeouts included, is reported as GenerationFailed.

    Args:
        url: Full chat-completions endpoint.
        model: Model identifier sent with each request.
        api_key: Optional bearer token.
        timeout: Seconds allowed per request.
        client: Optional httpx client (for testing with mocks).
    """

    def __init__(
        self,
        url: str,
        model: str,
        api_key: str | None = None,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._model = model
        self._api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def complete(self, messages: list[dict[str, str]]) -> Any:
        """Request a completion for a chat message list.

        Args:
            messages: Chat messages (role/content dicts).

        Returns:
            Decoded JSON body of the completion.

        Raises:
            GenerationFailed: On any transport, status or decoding failure.
        """
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}
        try:
            response = await self._client.post(
                self._url,
                json={"messages": messages, "model": self._model},
                headers=headers,
            )
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            logger.error(f"Language model request timed out: {e}")
            raise GenerationFailed(
                "The answer service took too long to respond", details=str(e)
            ) from e
        except httpx.HTTPStatusError as e:
            detail = response_detail(e.response)
            logger.error(f"Language model returned HTTP {e.response.status_code}: {detail}")
            raise GenerationFailed("The answer service rejected the request", details=detail) from e
        except httpx.RequestError as e:
            logger.error(f"Language model request failed: {e}")
            raise GenerationFailed("Could not reach the answer service", details=str(e)) from e
        except ValueError as e:
            logger.error("Language model returned malformed JSON")
            raise GenerationFailed(
                "The answer service returned an unreadable response", details=str(e)
            ) from e
