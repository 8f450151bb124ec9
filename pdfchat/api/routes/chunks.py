"""Chunk inspection endpoint - GET /chunks/{document_id}."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from pdfchat.api.auth import get_current_context
from pdfchat.db.context import RequestContext
from pdfchat.db.engine import get_session
from pdfchat.db.repositories import ChunkRepository, DocumentRepository
from pdfchat.errors import NotFoundError
from pdfchat.models.documents import DocChunk

router = APIRouter(prefix="/chunks", tags=["chunks"])


class ChunkListResponse(BaseModel):
    """Response for GET /chunks/{document_id}."""

    chunks: list[DocChunk]


@router.get("/{document_id}", response_model=ChunkListResponse)
async def list_chunks(
    document_id: UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ChunkListResponse:
    """A document's chunks in index order.

    Raises:
        NotFoundError: Document not in the caller's catalog
    """
    found = await DocumentRepository(session).get_documents(ctx, [document_id])
    if document_id not in found:
        raise NotFoundError("Document not found")

    chunks = await ChunkRepository(session).list_for_document(ctx, document_id)
    return ChunkListResponse(chunks=chunks)
