"""History ledger - read and rate recorded exchanges."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from pdfchat.db.context import RequestContext
from pdfchat.db.repositories import HistoryRepository
from pdfchat.errors import NotFoundError, ValidationError
from pdfchat.models.chat import ChatMessage, Rating


async def get_history(
    *, ctx: RequestContext, session_id: UUID, session: AsyncSession
) -> list[ChatMessage]:
    """Messages in stored order; empty when nothing has been recorded yet."""
    messages = await HistoryRepository(session).get_messages(ctx, session_id)
    return messages or []


async def rate_message(
    *,
    ctx: RequestContext,
    session_id: UUID,
    message_index: int,
    rating: str | Rating,
    session: AsyncSession,
) -> None:
    """Set the rating of one message, leaving every other field alone.

    Raises:
        ValidationError: Rating outside {up, down} or index out of range
        NotFoundError: No ledger recorded for the session
    """
    try:
        value = Rating(rating)
    except ValueError as e:
        raise ValidationError("Invalid rating value") from e

    history = HistoryRepository(session)
    count = await history.count_messages(ctx, session_id)
    if count is None:
        raise NotFoundError("Chat history not found")

    if message_index < 0 or message_index >= count:
        raise ValidationError("Invalid message index")

    if not await history.set_rating(ctx, session_id, message_index, value):
        raise ValidationError("Invalid message index")
    await session.commit()
