"""Document ingestion - validate, dedup, extract, chunk and persist an upload batch."""

import asyncio
import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from pdfchat.chat.binder import bind_session
from pdfchat.config import Settings
from pdfchat.db.context import RequestContext
from pdfchat.db.repositories import ChunkRepository, DocumentRepository
from pdfchat.docs.chunker import DEFAULT_CHUNK_SIZE, chunk_document
from pdfchat.docs.dedup import UploadDecision, classify_upload, content_digest
from pdfchat.docs.extractor import TextExtractor
from pdfchat.docs.storage import LocalContentStore
from pdfchat.errors import ValidationError
from pdfchat.models.chat import ChatSession
from pdfchat.models.documents import ChunkingStatus, UserDocument
from pdfchat.utils.logging import StructuredIngestLogger
from pdfchat.utils.metrics import PrometheusChatMetrics

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"

_ingest_log = StructuredIngestLogger()
_metrics = PrometheusChatMetrics()


@dataclass(frozen=True)
class IncomingFile:
    """One file from an upload request."""

    original_name: str
    content_type: str | None
    data: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.data)


class FileFailure(BaseModel):
    """A file that could not be ingested."""

    original_name: str
    reason: str


class IngestBatchResult(BaseModel):
    """Outcome of an upload batch."""

    new_documents: list[UserDocument]
    duplicates: list[str]
    failures: list[FileFailure]
    session: ChatSession | None


def validate_batch(files: Sequence[IncomingFile], settings: Settings) -> None:
    """Reject a batch before any processing.

    Raises:
        ValidationError: No files, too many files, a non-PDF, or an oversized file
    """
    if not files:
        raise ValidationError("No files uploaded or only non-PDF files were sent")

    if len(files) > settings.max_upload_files:
        raise ValidationError(f"At most {settings.max_upload_files} files may be uploaded at once")

    for f in files:
        if f.content_type != PDF_CONTENT_TYPE:
            raise ValidationError(f"Only PDF files are allowed: {f.original_name}")
        if f.size_bytes > settings.max_upload_bytes:
            raise ValidationError(
                f"File too large: {f.original_name} exceeds {settings.max_upload_bytes} bytes"
            )


async def ingest_file(
    *,
    ctx: RequestContext,
    incoming: IncomingFile,
    session: AsyncSession,
    extractor: TextExtractor,
    store: LocalContentStore,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> UserDocument | None:
    """Ingest a single file and commit it.

    The catalog entry and its chunks are written in one transaction. Text that
    extracts to nothing still registers the document, with zero chunks.

    Returns:
        The new catalog entry, or None if the file is a duplicate

    Raises:
        Exception: Any extraction, storage or database failure. Staged and
            promoted bytes are removed and the transaction rolled back first.
    """
    documents = DocumentRepository(session)
    chunks_repo = ChunkRepository(session)

    digest = content_digest(incoming.data)
    temp_path = store.stage(ctx, incoming.data)
    disk_path = temp_path

    try:
        same_name = await documents.find_by_name(ctx, incoming.original_name)
        decision = classify_upload(
            same_name,
            original_name=incoming.original_name,
            size_bytes=incoming.size_bytes,
        )
        if decision is UploadDecision.duplicate:
            store.discard(temp_path)
            _ingest_log.log_file(
                ctx, incoming.original_name, "duplicate", size_bytes=incoming.size_bytes
            )
            _metrics.record_file("duplicate")
            return None

        text = await asyncio.to_thread(extractor.extract_text, incoming.data)
        chunks = chunk_document(text, max_chars=chunk_size)

        stored = store.promote(ctx, temp_path, incoming.original_name)
        disk_path = stored.disk_path

        doc = await documents.add_document(
            ctx,
            document_id=uuid.uuid4(),
            original_name=incoming.original_name,
            filename=stored.filename,
            path=stored.path,
            size_bytes=incoming.size_bytes,
            content_hash=digest,
            chunking_status=ChunkingStatus.populated if chunks else ChunkingStatus.empty,
        )
        await chunks_repo.add_chunks(ctx, doc.document_id, chunks)
        await session.commit()
    except Exception:
        await session.rollback()
        store.discard(disk_path)
        raise

    if not chunks:
        logger.warning(f"No text extracted from PDF: {incoming.original_name}")

    _ingest_log.log_file(
        ctx,
        incoming.original_name,
        "registered",
        size_bytes=incoming.size_bytes,
        document_id=str(doc.document_id),
        chunk_count=len(chunks),
    )
    _metrics.record_file(decision.value, chunk_count=len(chunks))
    return doc


async def ingest_batch(
    *,
    ctx: RequestContext,
    files: Sequence[IncomingFile],
    session: AsyncSession,
    extractor: TextExtractor,
    store: LocalContentStore,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> IngestBatchResult:
    """Ingest files one after another and bind the new ones into a session.

    A failing file is logged and left out of the batch; its siblings still
    go through. Exactly one session is created when at least one file was
    newly registered.
    """
    new_documents: list[UserDocument] = []
    duplicates: list[str] = []
    failures: list[FileFailure] = []

    for incoming in files:
        try:
            doc = await ingest_file(
                ctx=ctx,
                incoming=incoming,
                session=session,
                extractor=extractor,
                store=store,
                chunk_size=chunk_size,
            )
        except Exception as e:
            logger.exception(f"Error processing file {incoming.original_name}")
            _ingest_log.log_file(
                ctx,
                incoming.original_name,
                "failed",
                size_bytes=incoming.size_bytes,
                error_reason=type(e).__name__,
            )
            _metrics.record_file("failed")
            failures.append(
                FileFailure(original_name=incoming.original_name, reason="Could not process file")
            )
            continue

        if doc is None:
            duplicates.append(incoming.original_name)
        else:
            new_documents.append(doc)

    chat_session = await bind_session(
        ctx, [doc.document_id for doc in new_documents], session=session
    )

    return IngestBatchResult(
        new_documents=new_documents,
        duplicates=duplicates,
        failures=failures,
        session=chat_session,
    )
