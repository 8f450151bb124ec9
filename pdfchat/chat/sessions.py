"""Chat session listing, archive toggle and cascading delete."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from pdfchat.db.context import RequestContext
from pdfchat.db.repositories import (
    ChatSessionRepository,
    ChunkRepository,
    DocumentRepository,
    HistoryRepository,
)
from pdfchat.docs.storage import LocalContentStore
from pdfchat.errors import NotFoundError
from pdfchat.models.chat import SessionSummary

logger = logging.getLogger(__name__)


async def list_session_summaries(
    *, ctx: RequestContext, session: AsyncSession
) -> list[SessionSummary]:
    """Every session of the caller, joined against the caller's catalog.

    Documents no longer in the catalog are left out of the counts and names.
    """
    sessions = await ChatSessionRepository(session).list_sessions(ctx)
    catalog = {doc.document_id: doc for doc in await DocumentRepository(session).list_documents(ctx)}

    summaries = []
    for chat_session in sessions:
        docs = [catalog[doc_id] for doc_id in chat_session.document_ids if doc_id in catalog]
        summaries.append(
            SessionSummary(
                session_id=chat_session.session_id,
                document_count=len(docs),
                document_names=[doc.original_name for doc in docs],
                documents=docs,
                archived=chat_session.archived,
                created_at=chat_session.created_at,
            )
        )
    return summaries


async def toggle_archive(*, ctx: RequestContext, session_id: UUID, session: AsyncSession) -> bool:
    """Flip the archived flag and return its new value.

    Raises:
        NotFoundError: Session absent for the caller
    """
    archived = await ChatSessionRepository(session).toggle_archived(ctx, session_id)
    if archived is None:
        raise NotFoundError("Chat session not found")
    await session.commit()
    return archived


async def delete_session(
    *,
    ctx: RequestContext,
    session_id: UUID,
    session: AsyncSession,
    store: LocalContentStore | None = None,
) -> None:
    """Delete a session and everything bound to it.

    Steps run and commit in order: ledger, chunks, catalog entries, session
    record. There is no enclosing transaction; a failure part way leaves the
    session record in place so the caller can retry. Stored bytes are removed
    last, once nothing references them.

    Raises:
        NotFoundError: Session absent for the caller
    """
    sessions = ChatSessionRepository(session)
    chat_session = await sessions.get_session(ctx, session_id)
    if chat_session is None:
        raise NotFoundError("Chat session not found")

    document_ids = chat_session.document_ids
    documents = DocumentRepository(session)
    stored = await documents.get_documents(ctx, document_ids)

    await HistoryRepository(session).delete_history(ctx, session_id)
    await session.commit()

    removed_chunks = await ChunkRepository(session).delete_for_documents(ctx, document_ids)
    await session.commit()

    removed_docs = await documents.delete_documents(ctx, document_ids)
    await session.commit()

    await sessions.delete_session(ctx, session_id)
    await session.commit()

    logger.info(
        f"Deleted chat session {session_id}: {removed_chunks} chunk(s), "
        f"{removed_docs} document(s)"
    )

    if store is not None:
        for doc in stored.values():
            store.remove(ctx, doc.filename)
