"""Request gateway: the stable API the UI talks to.

Validates client input before any network call, relays to the document
store and the language model, and normalizes every failure into the
error taxonomy in ``docchat.errors``.

Upload handling copies the incoming binary into a temporary file under
the configured upload directory from a worker thread, counting bytes as
it goes, then forwards that file and deletes it on every exit path.
"""

import io
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, BinaryIO, TypeVar

from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ValidationError

from docchat.config import ALLOWED_MIME_TYPES, GatewayConfig, get_gateway_config
from docchat.errors import GenerationFailed, InvalidInput, UnsupportedType, UpstreamError
from docchat.models.schemas import (
    ChatCompletion,
    ContextChunk,
    DocumentReference,
    OrderDirection,
)
from docchat.upstream import DocumentStoreClient, LanguageModelClient

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024
_ModelT = TypeVar("_ModelT", bound=BaseModel)

SYSTEM_PROMPT = (
    "You are a helpful assistant that answers questions based on provided document context."
)
FILE_TOO_LARGE_MESSAGE = "File is too large. Maximum size is 100MB"
UNSUPPORTED_TYPE_MESSAGE = "Only PDF and text files are allowed"


def build_prompt(question: str, context: str) -> str:
    """Embed the retrieved context verbatim ahead of the question."""
    return (
        f"Context from documents: {context}\n\n"
        f"Question: {question}\n\n"
        "Answer based on the provided context:"
    )


def normalize_mime(content_type: str | None) -> str:
    """Drop parameters (``; charset=...``) and lowercase a MIME type."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def _parse(model: type[_ModelT], payload: Any, what: str) -> _ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.error(f"Unexpected {what} payload from document store: {payload!r}")
        raise UpstreamError(
            "The document service returned an unexpected response", details=payload
        ) from e


class RequestGateway:
    """Stateless relay between the UI and the upstream services.

    Args:
        config: Optional gateway configuration. Loads from environment if
            not provided.
        document_store: Optional document store client (for testing).
        language_model: Optional language model client (for testing).
    """

    def __init__(
        self,
        config: GatewayConfig | None = None,
        document_store: DocumentStoreClient | None = None,
        language_model: LanguageModelClient | None = None,
    ) -> None:
        self._config = config or get_gateway_config()
        self._store = document_store or DocumentStoreClient(
            base_url=self._config.document_store_url,
            api_key=self._config.document_store_api_key,
            timeout=self._config.upstream_timeout,
        )
        self._llm = language_model or LanguageModelClient(
            url=self._config.language_model_url,
            model=self._config.language_model_name,
            api_key=self._config.language_model_api_key,
            timeout=self._config.upstream_timeout,
        )

    @property
    def config(self) -> GatewayConfig:
        return self._config

    async def aclose(self) -> None:
        """Close the upstream HTTP clients."""
        await self._store.aclose()
        await self._llm.aclose()

    async def upload_file(
        self,
        binary: bytes | BinaryIO,
        filename: str | None,
        content_type: str | None,
    ) -> DocumentReference:
        """Validate an upload and forward it to the document store.

        Args:
            binary: File content, as bytes or a readable binary stream.
            filename: Original filename, forwarded to the store.
            content_type: MIME type reported by the client.

        Returns:
            Reference carrying the identifier assigned by the store.

        Raises:
            InvalidInput: No filename, or content larger than the limit.
            UnsupportedType: MIME type is neither PDF nor plain text.
            UpstreamTimeout, UpstreamError: The store call failed.
        """
        if not filename:
            raise InvalidInput("No file uploaded")

        mime = normalize_mime(content_type)
        if mime not in ALLOWED_MIME_TYPES:
            logger.warning(f"Rejected upload {filename!r} with type {content_type!r}")
            raise UnsupportedType(UNSUPPORTED_TYPE_MESSAGE, details={"content_type": content_type})

        if isinstance(binary, bytes):
            binary = io.BytesIO(binary)

        self._config.upload_dir.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(
            dir=self._config.upload_dir,
            prefix="file-",
            suffix=Path(filename).suffix,
        )
        path = Path(name)
        try:
            with os.fdopen(fd, "wb") as tmp:
                size = await run_in_threadpool(self._copy_limited, binary, tmp)
            logger.info(f"Forwarding upload {filename!r} ({size} bytes)")
            payload = await self._store.upload_file(path, filename, mime)
        finally:
            self._discard(path)

        if isinstance(payload, dict):
            payload = {"file_name": filename, **payload}
        return _parse(DocumentReference, payload, "upload")

    def _copy_limited(self, source: BinaryIO, target: BinaryIO) -> int:
        limit = self._config.max_upload_size
        size = 0
        while chunk := source.read(_CHUNK_SIZE):
            size += len(chunk)
            if size > limit:
                logger.warning(f"Rejected upload exceeding {limit} bytes")
                raise InvalidInput(FILE_TOO_LARGE_MESSAGE)
            target.write(chunk)
        return size

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Error deleting temporary file {path}: {e}")

    async def upload_text(self, name: str | None, contents: str | None) -> DocumentReference:
        """Upload a named text document.

        Raises:
            InvalidInput: Either field is missing or blank.
        """
        if not name or not name.strip() or not contents or not contents.strip():
            raise InvalidInput("Both name and contents are required")

        payload = await self._store.upload_text(name, contents)
        if isinstance(payload, dict):
            payload = {"file_name": name, **payload}
        return _parse(DocumentReference, payload, "upload_text")

    async def list_files(
        self,
        offset: int = 0,
        limit: int = 10,
        order_dir: str = "desc",
    ) -> list[DocumentReference]:
        """List uploaded files, one page at a time.

        Args:
            offset: Number of files to skip.
            limit: Page size.
            order_dir: ``asc`` or ``desc`` by creation time.

        Returns:
            The page, possibly empty.

        Raises:
            InvalidInput: Negative offset, non-positive limit or unknown direction.
        """
        if offset < 0:
            raise InvalidInput("offset must be zero or greater")
        if limit < 1:
            raise InvalidInput("limit must be at least 1")
        try:
            direction = OrderDirection(order_dir)
        except ValueError as e:
            raise InvalidInput("order_dir must be 'asc' or 'desc'") from e

        payload = await self._store.user_files(limit, offset, direction.value)
        if not isinstance(payload, dict):
            raise UpstreamError(
                "The document service returned an unexpected response", details=payload
            )
        results = payload.get("results") or []
        if not isinstance(results, list):
            raise UpstreamError(
                "The document service returned an unexpected response", details=payload
            )
        return [_parse(DocumentReference, item, "user_files") for item in results]

    async def search(
        self,
        query: str | None,
        file_ids: list[str] | None,
        k: int = 3,
    ) -> list[ContextChunk]:
        """Retrieve the top-k chunks for a query within the given files.

        An empty or missing ``file_ids`` is rejected rather than widened to
        all files.

        Returns:
            At most ``k`` chunks, ranked in upstream order starting at 1.

        Raises:
            InvalidInput: Blank query, no file ids, or k below 1.
        """
        if not query or not query.strip():
            raise InvalidInput("query is required")
        if not file_ids:
            raise InvalidInput("Select at least one document to search")
        if k < 1:
            raise InvalidInput("k must be at least 1")

        payload = await self._store.embeddings(query, list(file_ids), k)
        if not isinstance(payload, dict) or "documents" not in payload:
            logger.error(f"Unexpected embeddings payload from document store: {payload!r}")
            raise UpstreamError(
                "The document service returned an unexpected response", details=payload
            )
        documents = payload["documents"]
        if not isinstance(documents, list) or not all(isinstance(d, dict) for d in documents):
            raise UpstreamError(
                "The document service returned an unexpected response", details=payload
            )
        return [
            _parse(ContextChunk, {**doc, "rank": rank}, "embeddings")
            for rank, doc in enumerate(documents[:k], start=1)
        ]

    async def generate(self, question: str | None, context: str | None) -> ChatCompletion:
        """Ask the language model once, grounding it in ``context``.

        Raises:
            InvalidInput: Blank question.
            GenerationFailed: Any failure of the language model call.
        """
        if not question or not question.strip():
            raise InvalidInput("question is required")

        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_prompt(question, context or "")},
        ]
        payload = await self._llm.complete(messages)
        try:
            return ChatCompletion.model_validate(payload)
        except ValidationError as e:
            logger.error(f"Unexpected completion payload: {payload!r}")
            raise GenerationFailed(
                "The answer service returned an unexpected response", details=payload
            ) from e

    async def ask(self, question: str | None, context: str | None) -> str:
        """Generate an answer and return its text."""
        completion = await self.generate(question, context)
        return completion.answer


# Module-level singleton instance
_gateway: RequestGateway | None = None


def get_gateway() -> RequestGateway:
    """Get or create the global gateway.

    Returns:
        The RequestGateway instance.
    """
    global _gateway
    if _gateway is None:
        _gateway = RequestGateway()
    return _gateway


async def close_gateway() -> None:
    """Close and forget the global gateway, if one was created."""
    global _gateway
    if _gateway is not None:
        await _gateway.aclose()
        _gateway = None
