"""Chat endpoints - ask, history, rate, export."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from pdfchat.api.auth import get_current_context
from pdfchat.chat.exporter import export_filename, export_history
from pdfchat.chat.ledger import get_history, rate_message
from pdfchat.chat.orchestrator import ask_question
from pdfchat.chat.retrieval import Retriever, get_retriever
from pdfchat.db.context import RequestContext
from pdfchat.db.engine import get_session
from pdfchat.llm.client import CompletionClient, get_llm_client
from pdfchat.models.chat import ChatMessage

router = APIRouter(prefix="/chat", tags=["chat"])
logger = logging.getLogger(__name__)


class AskRequest(BaseModel):
    """Request body for POST /chat."""

    chat_session_id: UUID
    question: str = Field(..., min_length=1, description="Question about the session's documents")


class AskResponse(BaseModel):
    """Response for POST /chat."""

    answer: str


class HistoryResponse(BaseModel):
    """Response for GET /chat/{session_id}/history."""

    messages: list[ChatMessage]


class RateRequest(BaseModel):
    """Request body for POST /chat/{session_id}/rate.

    ``rating`` is checked by the ledger so a bad value yields 400, not 422.
    """

    message_index: int
    rating: str


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str


@router.post("", response_model=AskResponse)
async def ask(
    request: AskRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    session: Annotated[AsyncSession, Depends(get_session)],
    llm: Annotated[CompletionClient, Depends(get_llm_client)],
    retriever: Annotated[Retriever, Depends(get_retriever)],
) -> AskResponse:
    """Answer a question grounded on a chat session's documents."""
    answer = await ask_question(
        ctx=ctx,
        session_id=request.chat_session_id,
        question=request.question,
        session=session,
        llm=llm,
        retriever=retriever,
    )
    return AskResponse(answer=answer)


@router.get("/{session_id}/history", response_model=HistoryResponse)
async def history(
    session_id: UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HistoryResponse:
    """Recorded exchanges in order; empty list if none yet."""
    messages = await get_history(ctx=ctx, session_id=session_id, session=session)
    return HistoryResponse(messages=messages)


@router.post("/{session_id}/rate", response_model=MessageResponse)
async def rate(
    session_id: UUID,
    request: RateRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> MessageResponse:
    """Rate one recorded answer up or down."""
    await rate_message(
        ctx=ctx,
        session_id=session_id,
        message_index=request.message_index,
        rating=request.rating,
        session=session,
    )
    return MessageResponse(message="Rating updated")


@router.get("/{session_id}/export")
async def export(
    session_id: UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Response:
    """Download the session's chat history as a PDF."""
    pdf_bytes = await export_history(ctx=ctx, session_id=session_id, session=session)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename(session_id)}"'
        },
    )
