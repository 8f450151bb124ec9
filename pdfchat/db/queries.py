"""Tenancy-safe query helpers."""

from sqlalchemy import Select, select

from pdfchat.db.context import RequestContext
from pdfchat.db.models import ChatHistory, ChatSession, DocChunk, Document


def select_documents(ctx: RequestContext) -> Select[tuple[Document]]:
    """Select document rows owned by the caller."""
    return select(Document).where(Document.user_id == ctx.user_id)


def select_chunks(ctx: RequestContext) -> Select[tuple[DocChunk]]:
    """Select chunk rows owned by the caller."""
    return select(DocChunk).where(DocChunk.user_id == ctx.user_id)


def select_sessions(ctx: RequestContext) -> Select[tuple[ChatSession]]:
    """Select chat session rows owned by the caller."""
    return select(ChatSession).where(ChatSession.user_id == ctx.user_id)


def select_histories(ctx: RequestContext) -> Select[tuple[ChatHistory]]:
    """Select chat history rows owned by the caller."""
    return select(ChatHistory).where(ChatHistory.user_id == ctx.user_id)
