"""Chat session endpoints - archive toggle and cascading delete."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from pdfchat.api.auth import get_current_context
from pdfchat.chat.sessions import delete_session, toggle_archive
from pdfchat.db.context import RequestContext
from pdfchat.db.engine import get_session
from pdfchat.docs.storage import LocalContentStore, get_content_store

router = APIRouter(prefix="/chat-sessions", tags=["chat-sessions"])


class ArchiveResponse(BaseModel):
    """Response for POST /chat-sessions/{session_id}/archive."""

    archived: bool


class DeleteResponse(BaseModel):
    """Response for DELETE /chat-sessions/{session_id}."""

    message: str


@router.post("/{session_id}/archive", response_model=ArchiveResponse)
async def archive(
    session_id: UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ArchiveResponse:
    """Flip the session's archived flag."""
    archived = await toggle_archive(ctx=ctx, session_id=session_id, session=session)
    return ArchiveResponse(archived=archived)


@router.delete("/{session_id}", response_model=DeleteResponse)
async def delete(
    session_id: UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    session: Annotated[AsyncSession, Depends(get_session)],
    store: Annotated[LocalContentStore, Depends(get_content_store)],
) -> DeleteResponse:
    """Delete the session, its ledger, and its documents with their chunks."""
    await delete_session(ctx=ctx, session_id=session_id, session=session, store=store)
    return DeleteResponse(message="Chat session and related data deleted")
