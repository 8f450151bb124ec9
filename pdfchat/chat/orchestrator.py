"""Chat orchestrator - retrieve, prompt, complete, record."""

import logging
import time
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pdfchat.chat.retrieval import Retriever
from pdfchat.db.context import RequestContext
from pdfchat.db.repositories import ChatSessionRepository, ChunkRepository, HistoryRepository
from pdfchat.errors import NotFoundError, UpstreamError, ValidationError
from pdfchat.llm.client import CompletionClient, PromptMessage
from pdfchat.models.completion import CompletionAnswer, answer_text
from pdfchat.utils.metrics import PrometheusChatMetrics

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a helpful assistant that answers questions based on the provided document text."
)

_metrics = PrometheusChatMetrics()

# Concurrent asks on one session race for the next ledger slot
APPEND_ATTEMPTS = 3


def build_grounding_messages(grounding_text: str, question: str) -> list[PromptMessage]:
    """Build the two-part prompt: fixed instruction, then document text and question."""
    return [
        {"role": "system", "content": SYSTEM_INSTRUCTION},
        {
            "role": "user",
            "content": f"Document text:\n{grounding_text}\n\nQuestion: {question}",
        },
    ]


async def ask_question(
    *,
    ctx: RequestContext,
    session_id: UUID,
    question: str,
    session: AsyncSession,
    llm: CompletionClient,
    retriever: Retriever,
) -> str:
    """Answer a question grounded on a chat session's documents.

    The exchange is appended to the session's ledger only after the completion
    service answered. A "no answer" completion is recorded with sentinel text.

    Args:
        ctx: Request context (user_id)
        session_id: Chat session to ask against
        question: Non-empty user question
        session: Database session
        llm: Completion client
        retriever: Retrieval engine

    Returns:
        Answer text

    Raises:
        ValidationError: Empty question
        NotFoundError: Session missing, bound to no documents, or without chunks
        UpstreamError: Completion service failure; nothing is persisted
    """
    if not question or not question.strip():
        raise ValidationError("question is required")

    chat_session = await ChatSessionRepository(session).get_session(ctx, session_id)
    if chat_session is None or not chat_session.document_ids:
        raise NotFoundError("Chat session not found or empty")

    chunks = await ChunkRepository(session).list_for_documents(ctx, chat_session.document_ids)
    if not chunks:
        raise NotFoundError("No chunks found for this chat session")

    retrieval = retriever.retrieve(question, chunks)
    logger.info(
        f"[ask] session_id={session_id} chunks={len(chunks)} "
        f"selected={len(retrieval.chunks)} matched={retrieval.matched}"
    )

    messages = build_grounding_messages(retrieval.text, question)

    started = time.perf_counter()
    try:
        result = await llm.complete(messages)
    except UpstreamError:
        _metrics.record_completion("error", (time.perf_counter() - started) * 1000)
        raise

    outcome = "answer" if isinstance(result, CompletionAnswer) else "no_answer"
    _metrics.record_completion(outcome, (time.perf_counter() - started) * 1000)

    answer = answer_text(result)
    await record_exchange(
        ctx=ctx, session_id=session_id, question=question, answer=answer, session=session
    )
    return answer


async def record_exchange(
    *,
    ctx: RequestContext,
    session_id: UUID,
    question: str,
    answer: str,
    session: AsyncSession,
) -> int:
    """Append an exchange to the ledger and commit it.

    A writer that loses the race for the ledger row or the next position hits
    a unique constraint; the transaction is rolled back and the append retried
    against the fresh ledger.

    Returns:
        Zero-based index of the recorded message
    """
    history = HistoryRepository(session)
    for attempt in range(1, APPEND_ATTEMPTS + 1):
        try:
            position = await history.append_message(
                ctx, session_id, question=question, answer=answer
            )
            await session.commit()
            return position
        except IntegrityError:
            await session.rollback()
            if attempt == APPEND_ATTEMPTS:
                raise
            logger.warning(
                f"[ask] session_id={session_id} ledger append collided, retrying "
                f"(attempt {attempt}/{APPEND_ATTEMPTS})"
            )
    raise AssertionError("unreachable")
