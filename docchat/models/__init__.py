"""Pydantic models for API requests, responses and session state.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - DocumentReference: A file known to the document store
    - ContextChunk: A ranked text fragment from a search
    - ChatCompletion: Language model response
    - TranscriptEntry: A line of the chat transcript
    - UploadTextRequest, SearchRequest, AskRequest: Gateway request bodies
"""

from docchat.models.schemas import (
    AskRequest,
    ChatCompletion,
    ContextChunk,
    DocumentReference,
    ErrorResponse,
    FileListResponse,
    OrderDirection,
    Role,
    SearchRequest,
    SearchResponse,
    TranscriptEntry,
    UploadTextRequest,
)

__all__ = [
    "AskRequest",
    "ChatCompletion",
    "ContextChunk",
    "DocumentReference",
    "ErrorResponse",
    "FileListResponse",
    "OrderDirection",
    "Role",
    "SearchRequest",
    "SearchResponse",
    "TranscriptEntry",
    "UploadTextRequest",
]
