"""SQL repositories for the catalog, chunk store, sessions and ledger.

Repositories stage changes on the session and flush; committing is left to the
calling service so it controls the unit of work.
"""

import uuid
from collections.abc import Sequence
from datetime import UTC, datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pdfchat.db.context import RequestContext
from pdfchat.db.models import ChatHistory as ChatHistoryDB
from pdfchat.db.models import ChatMessage as ChatMessageDB
from pdfchat.db.models import ChatSession as ChatSessionDB
from pdfchat.db.models import DocChunk as DocChunkDB
from pdfchat.db.models import Document as DocumentDB
from pdfchat.db.queries import (
    select_chunks,
    select_documents,
    select_histories,
    select_sessions,
)
from pdfchat.models.chat import ChatMessage, ChatSession, Rating
from pdfchat.models.documents import ChunkingStatus, DocChunk, UserDocument


def _to_document(row: DocumentDB) -> UserDocument:
    return UserDocument(
        document_id=row.document_id,
        user_id=row.user_id,
        original_name=row.original_name,
        filename=row.filename,
        path=row.path,
        size_bytes=row.size_bytes,
        content_hash=row.content_hash,
        chunking_status=ChunkingStatus(row.chunking_status),
        uploaded_at=row.uploaded_at,
    )


def _to_chunk(row: DocChunkDB) -> DocChunk:
    return DocChunk(
        chunk_id=row.chunk_id,
        user_id=row.user_id,
        document_id=row.document_id,
        chunk_index=row.chunk_index,
        text=row.text,
    )


def _to_session(row: ChatSessionDB) -> ChatSession:
    return ChatSession(
        session_id=row.session_id,
        user_id=row.user_id,
        document_ids=[uuid.UUID(str(doc_id)) for doc_id in row.document_ids],
        archived=row.archived,
        created_at=row.created_at,
    )


class DocumentRepository:
    """Per-user document catalog keyed by document id."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_documents(self, ctx: RequestContext) -> list[UserDocument]:
        """All catalog entries for the caller, oldest first."""
        result = await self._session.execute(
            select_documents(ctx).order_by(DocumentDB.uploaded_at, DocumentDB.document_id)
        )
        return [_to_document(row) for row in result.scalars().all()]

    async def get_documents(
        self, ctx: RequestContext, document_ids: Sequence[uuid.UUID]
    ) -> dict[uuid.UUID, UserDocument]:
        """Catalog entries for the given ids that the caller owns."""
        if not document_ids:
            return {}
        result = await self._session.execute(
            select_documents(ctx).where(DocumentDB.document_id.in_(list(document_ids)))
        )
        return {row.document_id: _to_document(row) for row in result.scalars().all()}

    async def find_by_name(self, ctx: RequestContext, original_name: str) -> list[UserDocument]:
        """Catalog entries sharing a declared file name."""
        result = await self._session.execute(
            select_documents(ctx)
            .where(DocumentDB.original_name == original_name)
            .order_by(DocumentDB.uploaded_at)
        )
        return [_to_document(row) for row in result.scalars().all()]

    async def add_document(
        self,
        ctx: RequestContext,
        *,
        document_id: uuid.UUID,
        original_name: str,
        filename: str,
        path: str,
        size_bytes: int,
        content_hash: str,
        chunking_status: ChunkingStatus,
    ) -> UserDocument:
        """Stage a new catalog entry."""
        row = DocumentDB(
            document_id=document_id,
            user_id=ctx.user_id,
            original_name=original_name,
            filename=filename,
            path=path,
            size_bytes=size_bytes,
            content_hash=content_hash,
            chunking_status=chunking_status.value,
            uploaded_at=datetime.now(UTC),
        )
        self._session.add(row)
        await self._session.flush()
        return _to_document(row)

    async def delete_documents(
        self, ctx: RequestContext, document_ids: Sequence[uuid.UUID]
    ) -> int:
        """Remove catalog entries owned by the caller. Returns rows removed."""
        if not document_ids:
            return 0
        result = await self._session.execute(
            delete(DocumentDB).where(
                DocumentDB.user_id == ctx.user_id,
                DocumentDB.document_id.in_(list(document_ids)),
            )
        )
        return result.rowcount or 0


class ChunkRepository:
    """Chunk store keyed by (user, document)."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add_chunks(
        self,
        ctx: RequestContext,
        document_id: uuid.UUID,
        chunks: Sequence[tuple[int, str]],
    ) -> int:
        """Stage (chunk_index, text) pairs for a document."""
        for chunk_index, text in chunks:
            self._session.add(
                DocChunkDB(
                    chunk_id=uuid.uuid4(),
                    user_id=ctx.user_id,
                    document_id=document_id,
                    chunk_index=chunk_index,
                    text=text,
                )
            )
        await self._session.flush()
        return len(chunks)

    async def list_for_document(
        self, ctx: RequestContext, document_id: uuid.UUID
    ) -> list[DocChunk]:
        """Chunks of one document in index order."""
        result = await self._session.execute(
            select_chunks(ctx)
            .where(DocChunkDB.document_id == document_id)
            .order_by(DocChunkDB.chunk_index)
        )
        return [_to_chunk(row) for row in result.scalars().all()]

    async def list_for_documents(
        self, ctx: RequestContext, document_ids: Sequence[uuid.UUID]
    ) -> list[DocChunk]:
        """Union of chunks across documents, ordered by chunk index.

        Equal indexes keep the order of ``document_ids``.
        """
        if not document_ids:
            return []
        result = await self._session.execute(
            select_chunks(ctx).where(DocChunkDB.document_id.in_(list(document_ids)))
        )
        position = {doc_id: i for i, doc_id in enumerate(document_ids)}
        chunks = [_to_chunk(row) for row in result.scalars().all()]
        chunks.sort(key=lambda c: (c.chunk_index, position[c.document_id]))
        return chunks

    async def delete_for_documents(
        self, ctx: RequestContext, document_ids: Sequence[uuid.UUID]
    ) -> int:
        """Remove the caller's chunks for the given documents."""
        if not document_ids:
            return 0
        result = await self._session.execute(
            delete(DocChunkDB).where(
                DocChunkDB.user_id == ctx.user_id,
                DocChunkDB.document_id.in_(list(document_ids)),
            )
        )
        return result.rowcount or 0


class ChatSessionRepository:
    """Chat session records."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_session(
        self, ctx: RequestContext, document_ids: Sequence[uuid.UUID]
    ) -> ChatSession:
        """Stage a new session bound to ``document_ids``.

        Raises:
            ValueError: If ``document_ids`` is empty.
        """
        if not document_ids:
            raise ValueError("A chat session needs at least one document")
        row = ChatSessionDB(
            session_id=uuid.uuid4(),
            user_id=ctx.user_id,
            document_ids=[str(doc_id) for doc_id in document_ids],
            archived=False,
            created_at=datetime.now(UTC),
        )
        self._session.add(row)
        await self._session.flush()
        return _to_session(row)

    async def get_session(self, ctx: RequestContext, session_id: uuid.UUID) -> ChatSession | None:
        result = await self._session.execute(
            select_sessions(ctx).where(ChatSessionDB.session_id == session_id)
        )
        row = result.scalar_one_or_none()
        return _to_session(row) if row is not None else None

    async def list_sessions(self, ctx: RequestContext) -> list[ChatSession]:
        result = await self._session.execute(
            select_sessions(ctx).order_by(ChatSessionDB.created_at, ChatSessionDB.session_id)
        )
        return [_to_session(row) for row in result.scalars().all()]

    async def toggle_archived(self, ctx: RequestContext, session_id: uuid.UUID) -> bool | None:
        """Flip the archived flag. Returns the new value, or None if absent."""
        result = await self._session.execute(
            select_sessions(ctx).where(ChatSessionDB.session_id == session_id)
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None
        row.archived = not row.archived
        await self._session.flush()
        return row.archived

    async def delete_session(self, ctx: RequestContext, session_id: uuid.UUID) -> int:
        result = await self._session.execute(
            delete(ChatSessionDB).where(
                ChatSessionDB.user_id == ctx.user_id,
                ChatSessionDB.session_id == session_id,
            )
        )
        return result.rowcount or 0


class HistoryRepository:
    """Append-only chat ledger per (user, session)."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _get_history(
        self, ctx: RequestContext, session_id: uuid.UUID
    ) -> ChatHistoryDB | None:
        result = await self._session.execute(
            select_histories(ctx).where(ChatHistoryDB.session_id == session_id)
        )
        return result.scalar_one_or_none()

    async def get_messages(
        self, ctx: RequestContext, session_id: uuid.UUID
    ) -> list[ChatMessage] | None:
        """Messages in ledger order, or None if no ledger exists yet."""
        history = await self._get_history(ctx, session_id)
        if history is None:
            return None
        result = await self._session.execute(
            select(ChatMessageDB)
            .where(ChatMessageDB.history_id == history.history_id)
            .order_by(ChatMessageDB.position)
        )
        return [
            ChatMessage(
                question=row.question,
                answer=row.answer,
                rating=Rating(row.rating) if row.rating else None,
                created_at=row.created_at,
            )
            for row in result.scalars().all()
        ]

    async def append_message(
        self, ctx: RequestContext, session_id: uuid.UUID, *, question: str, answer: str
    ) -> int:
        """Append an unrated exchange, creating the ledger on first use.

        Returns:
            Zero-based index of the new message
        """
        history = await self._get_history(ctx, session_id)
        if history is None:
            history = ChatHistoryDB(
                history_id=uuid.uuid4(),
                user_id=ctx.user_id,
                session_id=session_id,
                created_at=datetime.now(UTC),
            )
            self._session.add(history)
            await self._session.flush()
            position = 0
        else:
            result = await self._session.execute(
                select(func.count())
                .select_from(ChatMessageDB)
                .where(ChatMessageDB.history_id == history.history_id)
            )
            position = result.scalar_one()

        self._session.add(
            ChatMessageDB(
                message_id=uuid.uuid4(),
                history_id=history.history_id,
                position=position,
                question=question,
                answer=answer,
                rating=None,
                created_at=datetime.now(UTC),
            )
        )
        await self._session.flush()
        return position

    async def count_messages(self, ctx: RequestContext, session_id: uuid.UUID) -> int | None:
        """Ledger length, or None if no ledger exists yet."""
        history = await self._get_history(ctx, session_id)
        if history is None:
            return None
        result = await self._session.execute(
            select(func.count())
            .select_from(ChatMessageDB)
            .where(ChatMessageDB.history_id == history.history_id)
        )
        return result.scalar_one()

    async def set_rating(
        self, ctx: RequestContext, session_id: uuid.UUID, index: int, rating: Rating
    ) -> bool:
        """Set one message's rating. Returns False if the message is absent."""
        history = await self._get_history(ctx, session_id)
        if history is None:
            return False
        result = await self._session.execute(
            select(ChatMessageDB).where(
                ChatMessageDB.history_id == history.history_id,
                ChatMessageDB.position == index,
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            return False
        row.rating = rating.value
        await self._session.flush()
        return True

    async def delete_history(self, ctx: RequestContext, session_id: uuid.UUID) -> int:
        """Remove the ledger and its messages. Returns ledgers removed."""
        history = await self._get_history(ctx, session_id)
        if history is None:
            return 0
        await self._session.execute(
            delete(ChatMessageDB).where(ChatMessageDB.history_id == history.history_id)
        )
        await self._session.execute(
            delete(ChatHistoryDB).where(ChatHistoryDB.history_id == history.history_id)
        )
        return 1
