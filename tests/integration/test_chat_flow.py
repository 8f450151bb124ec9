"""Integration tests for asking, the history ledger, rating and export."""

import uuid

import fitz  # PyMuPDF
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from pdfchat.chat.exporter import export_history
from pdfchat.chat.ledger import get_history, rate_message
from pdfchat.chat.orchestrator import SYSTEM_INSTRUCTION, ask_question
from pdfchat.chat.retrieval import SubstringRetriever
from pdfchat.db.context import RequestContext
from pdfchat.db.repositories import ChatSessionRepository, ChunkRepository, DocumentRepository
from pdfchat.docs.ingest import ingest_batch
from pdfchat.docs.storage import LocalContentStore
from pdfchat.errors import NotFoundError, UpstreamError, ValidationError
from pdfchat.llm.client import DeterministicStubClient
from pdfchat.models.chat import ChatSession, Rating
from pdfchat.models.completion import NO_ANSWER_TEXT
from tests.fakes import EmptyLLM, FailingLLM, FakeExtractor, RecordingLLM, pdf_file


@pytest_asyncio.fixture
async def chat_session(
    db_session: AsyncSession,
    ctx: RequestContext,
    extractor: FakeExtractor,
    store: LocalContentStore,
) -> ChatSession:
    """A session over two documents, chunked at 40 characters."""
    result = await ingest_batch(
        ctx=ctx,
        files=[
            pdf_file("france.pdf", "Paris is the capital of France. " * 3),
            pdf_file("fruit.pdf", "Bananas are yellow and grow in bunches."),
        ],
        session=db_session,
        extractor=extractor,
        store=store,
        chunk_size=40,
    )
    assert result.session is not None
    return result.session


async def _ask(
    db_session: AsyncSession,
    ctx: RequestContext,
    session_id: uuid.UUID,
    question: str,
    llm: object | None = None,
) -> str:
    return await ask_question(
        ctx=ctx,
        session_id=session_id,
        question=question,
        session=db_session,
        llm=llm or DeterministicStubClient(),  # type: ignore[arg-type]
        retriever=SubstringRetriever(),
    )


@pytest.mark.asyncio
async def test_ask_question_records_exchange(
    db_session: AsyncSession, ctx: RequestContext, chat_session: ChatSession
) -> None:
    answer = await _ask(db_session, ctx, chat_session.session_id, "What is the capital?")

    assert "What is the capital?" in answer
    messages = await get_history(ctx=ctx, session_id=chat_session.session_id, session=db_session)
    assert len(messages) == 1
    assert messages[0].question == "What is the capital?"
    assert messages[0].answer == answer
    assert messages[0].rating is None


@pytest.mark.asyncio
async def test_ask_question_grounds_prompt_on_matching_chunks(
    db_session: AsyncSession, ctx: RequestContext, chat_session: ChatSession
) -> None:
    llm = RecordingLLM()

    answer = await _ask(db_session, ctx, chat_session.session_id, "bananas?", llm)

    assert answer == "Paris is the capital."
    [messages] = llm.calls
    assert messages[0] == {"role": "system", "content": SYSTEM_INSTRUCTION}
    user_content = messages[1]["content"]
    assert user_content.startswith("Document text:\nBananas are yellow")
    assert user_content.endswith("\n\nQuestion: bananas?")
    assert "Paris" not in user_content


@pytest.mark.asyncio
async def test_ask_question_appends_in_order(
    db_session: AsyncSession, ctx: RequestContext, chat_session: ChatSession
) -> None:
    for question in ["first?", "second?", "third?"]:
        await _ask(db_session, ctx, chat_session.session_id, question)

    messages = await get_history(ctx=ctx, session_id=chat_session.session_id, session=db_session)
    assert [m.question for m in messages] == ["first?", "second?", "third?"]


@pytest.mark.asyncio
async def test_ask_question_no_completion_records_sentinel(
    db_session: AsyncSession, ctx: RequestContext, chat_session: ChatSession
) -> None:
    answer = await _ask(db_session, ctx, chat_session.session_id, "anything?", EmptyLLM())

    assert answer == NO_ANSWER_TEXT
    messages = await get_history(ctx=ctx, session_id=chat_session.session_id, session=db_session)
    assert messages[0].answer == NO_ANSWER_TEXT


@pytest.mark.asyncio
async def test_ask_question_upstream_failure_persists_nothing(
    db_session: AsyncSession, ctx: RequestContext, chat_session: ChatSession
) -> None:
    with pytest.raises(UpstreamError):
        await _ask(db_session, ctx, chat_session.session_id, "capital?", FailingLLM())

    assert await get_history(ctx=ctx, session_id=chat_session.session_id, session=db_session) == []


@pytest.mark.asyncio
async def test_ask_question_rejects_blank_question(
    db_session: AsyncSession, ctx: RequestContext, chat_session: ChatSession
) -> None:
    with pytest.raises(ValidationError, match="question is required"):
        await _ask(db_session, ctx, chat_session.session_id, "   ")


@pytest.mark.asyncio
async def test_ask_question_unknown_session(db_session: AsyncSession, ctx: RequestContext) -> None:
    with pytest.raises(NotFoundError, match="Chat session not found or empty"):
        await _ask(db_session, ctx, uuid.uuid4(), "capital?")


@pytest.mark.asyncio
async def test_ask_question_other_users_session_is_not_found(
    db_session: AsyncSession,
    other_ctx: RequestContext,
    chat_session: ChatSession,
) -> None:
    with pytest.raises(NotFoundError):
        await _ask(db_session, other_ctx, chat_session.session_id, "capital?")


@pytest.mark.asyncio
async def test_ask_question_session_without_chunks(
    db_session: AsyncSession,
    ctx: RequestContext,
    extractor: FakeExtractor,
    store: LocalContentStore,
) -> None:
    result = await ingest_batch(
        ctx=ctx,
        files=[pdf_file("blank.pdf", "   ")],
        session=db_session,
        extractor=extractor,
        store=store,
    )
    assert result.session is not None

    with pytest.raises(NotFoundError, match="No chunks found for this chat session"):
        await _ask(db_session, ctx, result.session.session_id, "anything?")


@pytest.mark.asyncio
async def test_ask_question_documents_removed_from_catalog(
    db_session: AsyncSession, ctx: RequestContext, chat_session: ChatSession
) -> None:
    """A session whose documents are gone has no chunks to ground on."""
    await ChunkRepository(db_session).delete_for_documents(ctx, chat_session.document_ids)
    await DocumentRepository(db_session).delete_documents(ctx, chat_session.document_ids)
    await db_session.commit()

    with pytest.raises(NotFoundError, match="No chunks found"):
        await _ask(db_session, ctx, chat_session.session_id, "capital?")


@pytest.mark.asyncio
async def test_get_history_before_any_question_is_empty(
    db_session: AsyncSession, ctx: RequestContext, chat_session: ChatSession
) -> None:
    assert await get_history(ctx=ctx, session_id=chat_session.session_id, session=db_session) == []


@pytest.mark.asyncio
async def test_rate_message_sets_only_that_rating(
    db_session: AsyncSession, ctx: RequestContext, chat_session: ChatSession
) -> None:
    await _ask(db_session, ctx, chat_session.session_id, "one?")
    await _ask(db_session, ctx, chat_session.session_id, "two?")
    before = await get_history(ctx=ctx, session_id=chat_session.session_id, session=db_session)

    await rate_message(
        ctx=ctx,
        session_id=chat_session.session_id,
        message_index=1,
        rating="down",
        session=db_session,
    )

    after = await get_history(ctx=ctx, session_id=chat_session.session_id, session=db_session)
    assert after[0].rating is None
    assert after[1].rating is Rating.down
    assert after[1].question == before[1].question
    assert after[1].answer == before[1].answer


@pytest.mark.asyncio
async def test_rate_message_last_write_wins(
    db_session: AsyncSession, ctx: RequestContext, chat_session: ChatSession
) -> None:
    await _ask(db_session, ctx, chat_session.session_id, "one?")

    for rating in ["up", "down", "up"]:
        await rate_message(
            ctx=ctx,
            session_id=chat_session.session_id,
            message_index=0,
            rating=rating,
            session=db_session,
        )

    messages = await get_history(ctx=ctx, session_id=chat_session.session_id, session=db_session)
    assert messages[0].rating is Rating.up


@pytest.mark.asyncio
async def test_rate_message_rejects_unknown_rating(
    db_session: AsyncSession, ctx: RequestContext, chat_session: ChatSession
) -> None:
    await _ask(db_session, ctx, chat_session.session_id, "one?")

    with pytest.raises(ValidationError, match="Invalid rating value"):
        await rate_message(
            ctx=ctx,
            session_id=chat_session.session_id,
            message_index=0,
            rating="meh",
            session=db_session,
        )


@pytest.mark.asyncio
@pytest.mark.parametrize("index", [-1, 1, 5])
async def test_rate_message_rejects_out_of_range_index(
    db_session: AsyncSession, ctx: RequestContext, chat_session: ChatSession, index: int
) -> None:
    await _ask(db_session, ctx, chat_session.session_id, "one?")

    with pytest.raises(ValidationError, match="Invalid message index"):
        await rate_message(
            ctx=ctx,
            session_id=chat_session.session_id,
            message_index=index,
            rating="up",
            session=db_session,
        )


@pytest.mark.asyncio
async def test_rate_message_without_history_is_not_found(
    db_session: AsyncSession, ctx: RequestContext, chat_session: ChatSession
) -> None:
    with pytest.raises(NotFoundError, match="Chat history not found"):
        await rate_message(
            ctx=ctx,
            session_id=chat_session.session_id,
            message_index=0,
            rating="up",
            session=db_session,
        )


@pytest.mark.asyncio
async def test_export_history_renders_recorded_exchanges(
    db_session: AsyncSession, ctx: RequestContext, chat_session: ChatSession
) -> None:
    await _ask(db_session, ctx, chat_session.session_id, "Where is Paris?")

    pdf_bytes = await export_history(
        ctx=ctx, session_id=chat_session.session_id, session=db_session
    )

    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        text = "".join(page.get_text() for page in doc)
    assert "Chat History" in text
    assert "Q1: Where is Paris?" in text


@pytest.mark.asyncio
async def test_export_history_without_ledger_is_not_found(
    db_session: AsyncSession, ctx: RequestContext, chat_session: ChatSession
) -> None:
    with pytest.raises(NotFoundError, match="Chat history not found"):
        await export_history(ctx=ctx, session_id=chat_session.session_id, session=db_session)


@pytest.mark.asyncio
async def test_session_chunks_follow_index_then_document_order(
    db_session: AsyncSession, ctx: RequestContext, chat_session: ChatSession
) -> None:
    chunks = await ChunkRepository(db_session).list_for_documents(ctx, chat_session.document_ids)
    sessions = await ChatSessionRepository(db_session).list_sessions(ctx)

    assert [s.session_id for s in sessions] == [chat_session.session_id]
    first_doc, second_doc = chat_session.document_ids
    assert [(c.chunk_index, c.document_id) for c in chunks[:3]] == [
        (0, first_doc),
        (0, second_doc),
        (1, first_doc),
    ]
