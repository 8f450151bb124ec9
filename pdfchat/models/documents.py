"""Document domain models."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel


class ChunkingStatus(str, Enum):
    """Whether a document's chunk set has been written, and if it holds anything."""

    pending = "pending"
    empty = "empty"
    populated = "populated"


class UserDocument(BaseModel):
    """Catalog entry for one uploaded PDF."""

    document_id: UUID
    user_id: UUID
    original_name: str
    filename: str
    path: str
    size_bytes: int
    content_hash: str
    chunking_status: ChunkingStatus = ChunkingStatus.pending
    uploaded_at: datetime


class DocChunk(BaseModel):
    """Fixed-window slice of a document's extracted text."""

    chunk_id: UUID
    user_id: UUID
    document_id: UUID
    chunk_index: int  # 0-based
    text: str
