from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Role(str, Enum):
    """Transcript entry roles."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM_ERROR = "system-error"


class OrderDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class DocumentReference(BaseModel):
    """A document known to the document store.

    Unknown upstream fields are kept so routes can pass them through.

    Attributes:
        file_id: Opaque identifier assigned by the store.
        file_name: Display name (not unique).
        created_at: Upload timestamp, if the store reported one.
    """

    model_config = ConfigDict(extra="allow")

    file_id: str = Field(..., min_length=1)
    file_name: str | None = None
    created_at: datetime | None = None


class ContextChunk(BaseModel):
    """A text fragment returned by a similarity search.

    Attributes:
        content: The fragment text.
        rank: 1-based position in the search result.
    """

    model_config = ConfigDict(extra="allow")

    content: str
    rank: int = Field(default=1, ge=1)


class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: str = "assistant"
    content: str


class ChatChoice(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: ChatMessage


class ChatCompletion(BaseModel):
    """Chat-completion payload as returned by the language model."""

    model_config = ConfigDict(extra="allow")

    choices: list[ChatChoice] = Field(..., min_length=1)

    @property
    def answer(self) -> str:
        """Content of the first choice."""
        return self.choices[0].message.content


class TranscriptEntry(BaseModel):
    """A single chat transcript line.

    Attributes:
        role: Who produced the entry (user, assistant, system-error).
        content: The displayed text.
        time: Display time of the entry.
    """

    role: Role
    content: str
    time: str = Field(default_factory=lambda: datetime.now().strftime("%I:%M %p"))


class UploadTextRequest(BaseModel):
    """Request payload for text uploads.

    Both fields are optional at the schema level so the gateway reports a
    missing field as InvalidInput rather than a schema error.
    """

    name: str | None = None
    contents: str | None = None


class SearchRequest(BaseModel):
    query: str | None = None
    file_ids: list[str] | None = None
    k: int = 3


class AskRequest(BaseModel):
    """Request payload for answer generation.

    Attributes:
        question: The user's question.
        context: Retrieved text the answer must be grounded in (may be empty).
    """

    question: str = Field(..., min_length=1)
    context: str = ""

    @field_validator("question", mode="before")
    @classmethod
    def strip_question(cls, v: Any) -> Any:
        """Strip whitespace from question before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class FileListResponse(BaseModel):
    results: list[DocumentReference]


class SearchResponse(BaseModel):
    documents: list[ContextChunk]


class ErrorResponse(BaseModel):
    """Error body returned by every gateway route.

    Attributes:
        error: Short user-readable message.
        kind: Error kind identifier.
        details: Optional diagnostic detail.
    """

    error: str
    kind: str
    details: Any = None
