"""Upload endpoints - POST /upload, GET /upload/sessions."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from pdfchat.api.auth import get_current_context
from pdfchat.chat.sessions import list_session_summaries
from pdfchat.config import Settings, get_settings
from pdfchat.db.context import RequestContext
from pdfchat.db.engine import get_session
from pdfchat.db.repositories import DocumentRepository
from pdfchat.docs.extractor import TextExtractor, get_extractor
from pdfchat.docs.ingest import (
    FileFailure,
    IncomingFile,
    ingest_batch,
    validate_batch,
)
from pdfchat.docs.storage import LocalContentStore, get_content_store
from pdfchat.models.chat import SessionSummary
from pdfchat.models.documents import UserDocument

router = APIRouter(prefix="/upload", tags=["upload"])
logger = logging.getLogger(__name__)


class UploadResponse(BaseModel):
    """Response for POST /upload."""

    message: str
    documents: list[UserDocument]  # full catalog after the batch
    session_id: UUID | None
    duplicates: list[str]
    failures: list[FileFailure]


class SessionListResponse(BaseModel):
    """Response for GET /upload/sessions."""

    sessions: list[SessionSummary]


async def _read_files(files: list[UploadFile]) -> list[IncomingFile]:
    return [
        IncomingFile(
            original_name=f.filename or "upload.pdf",
            content_type=f.content_type,
            data=await f.read(),
        )
        for f in files
    ]


@router.post("", response_model=UploadResponse)
async def upload_files(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    session: Annotated[AsyncSession, Depends(get_session)],
    settings: Annotated[Settings, Depends(get_settings)],
    extractor: Annotated[TextExtractor, Depends(get_extractor)],
    store: Annotated[LocalContentStore, Depends(get_content_store)],
    files: Annotated[list[UploadFile] | None, File(description="PDF files")] = None,
) -> UploadResponse:
    """Upload a batch of PDFs.

    Each file is deduplicated, extracted, chunked and registered on its own;
    the newly registered ones are bound into one chat session.

    Returns:
        The caller's full document catalog plus batch details
    """
    incoming = await _read_files(files or [])
    validate_batch(incoming, settings)

    result = await ingest_batch(
        ctx=ctx,
        files=incoming,
        session=session,
        extractor=extractor,
        store=store,
        chunk_size=settings.chunk_size,
    )

    logger.info(
        f"[POST /upload] user_id={ctx.user_id} new={len(result.new_documents)} "
        f"duplicates={len(result.duplicates)} failures={len(result.failures)}"
    )

    documents = await DocumentRepository(session).list_documents(ctx)
    return UploadResponse(
        message="Files uploaded",
        documents=documents,
        session_id=result.session.session_id if result.session else None,
        duplicates=result.duplicates,
        failures=result.failures,
    )


@router.get("/sessions", response_model=SessionListResponse)
async def list_sessions(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SessionListResponse:
    """List the caller's chat sessions with their documents and archived flag."""
    return SessionListResponse(sessions=await list_session_summaries(ctx=ctx, session=session))
