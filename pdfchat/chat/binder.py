"""Session binder - one chat session per upload batch."""

import logging
from collections.abc import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from pdfchat.db.context import RequestContext
from pdfchat.db.repositories import ChatSessionRepository
from pdfchat.models.chat import ChatSession

logger = logging.getLogger(__name__)


async def bind_session(
    ctx: RequestContext,
    document_ids: Sequence[UUID],
    *,
    session: AsyncSession,
) -> ChatSession | None:
    """Open a session over the documents newly registered by a batch.

    Returns:
        The new unarchived session, or None when the batch registered nothing
    """
    if not document_ids:
        return None

    chat_session = await ChatSessionRepository(session).create_session(ctx, document_ids)
    await session.commit()

    logger.info(
        f"Created chat session {chat_session.session_id} "
        f"with {len(document_ids)} document(s)"
    )
    return chat_session
