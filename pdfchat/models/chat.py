"""Chat session and ledger domain models."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from pdfchat.models.documents import UserDocument


class Rating(str, Enum):
    """Allowed values for rating an answer."""

    up = "up"
    down = "down"


class ChatSession(BaseModel):
    """A group of documents opened together for one conversation."""

    session_id: UUID
    user_id: UUID
    document_ids: list[UUID] = Field(..., min_length=1)
    archived: bool = False
    created_at: datetime


class ChatMessage(BaseModel):
    """One question/answer exchange. Position in the ledger is its index."""

    question: str
    answer: str
    rating: Rating | None = None
    created_at: datetime


class SessionSummary(BaseModel):
    """Session listing entry joined against the caller's catalog."""

    session_id: UUID
    document_count: int
    document_names: list[str]
    documents: list[UserDocument]
    archived: bool
    created_at: datetime
