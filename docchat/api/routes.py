"""Gateway routes under /api.

Each route validates through the RequestGateway and relays the upstream
response. Failures surface as GatewayError and are rendered by the
handlers registered in ``docchat.api.app``.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, UploadFile

from docchat.errors import InvalidInput
from docchat.gateway import RequestGateway, get_gateway
from docchat.models.schemas import AskRequest, ErrorResponse, SearchRequest, UploadTextRequest

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["documents"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input or unsupported type"},
        500: {"model": ErrorResponse, "description": "Unexpected gateway error"},
        502: {"model": ErrorResponse, "description": "Upstream or generation failure"},
        504: {"model": ErrorResponse, "description": "Upstream timeout"},
    },
)


@router.post("/upload")
async def upload_file(
    file: UploadFile | None = None,
    gateway: RequestGateway = Depends(get_gateway),
) -> dict[str, Any]:
    """Upload a PDF or text file to the document store.

    Args:
        file: The uploaded file (multipart field ``file``).
        gateway: Request gateway dependency.

    Returns:
        The store's response, including ``file_id``.

    Raises:
        400: No file, file too large, or unsupported type.
        502/504: Document store failure.
    """
    if file is None:
        raise InvalidInput("No file uploaded")

    try:
        reference = await gateway.upload_file(file.file, file.filename, file.content_type)
    finally:
        await file.close()

    logger.info(f"Uploaded {file.filename!r} as {reference.file_id}")
    return reference.model_dump(mode="json", exclude_none=True)


@router.post("/upload-text")
async def upload_text(
    request: UploadTextRequest,
    gateway: RequestGateway = Depends(get_gateway),
) -> dict[str, Any]:
    """Upload named text content to the document store."""
    reference = await gateway.upload_text(request.name, request.contents)
    return reference.model_dump(mode="json", exclude_none=True)


@router.get("/files")
async def list_files(
    limit: int = 10,
    offset: int = 0,
    order_dir: str = "desc",
    gateway: RequestGateway = Depends(get_gateway),
) -> dict[str, Any]:
    """List uploaded files, newest first by default."""
    files = await gateway.list_files(offset=offset, limit=limit, order_dir=order_dir)
    return {"results": [f.model_dump(mode="json", exclude_none=True) for f in files]}


@router.post("/search")
async def search(
    request: SearchRequest,
    gateway: RequestGateway = Depends(get_gateway),
) -> dict[str, Any]:
    """Return the top-k chunks relevant to a query within the given files."""
    chunks = await gateway.search(request.query, request.file_ids, request.k)
    return {"documents": [c.model_dump(mode="json", exclude={"rank"}) for c in chunks]}


@router.post("/ask")
async def ask(
    request: AskRequest,
    gateway: RequestGateway = Depends(get_gateway),
) -> dict[str, Any]:
    """Generate an answer grounded in the supplied context.

    Returns the language model's chat-completion payload unchanged.
    """
    completion = await gateway.generate(request.question, request.context)
    return completion.model_dump(mode="json")
