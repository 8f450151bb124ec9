"""Shared pytest fixtures for all test suites."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from pdfchat.config import Settings, get_settings
from pdfchat.db.context import RequestContext
from pdfchat.db.engine import get_session
from pdfchat.db.models import Base
from pdfchat.docs.extractor import get_extractor
from pdfchat.docs.storage import LocalContentStore, get_content_store
from pdfchat.llm.client import DeterministicStubClient, get_llm_client
from pdfchat.main import app
from tests.fakes import OTHER_USER_ID, TEST_USER_ID, FakeExtractor


@pytest.fixture
def ctx() -> RequestContext:
    return RequestContext(user_id=TEST_USER_ID)


@pytest.fixture
def other_ctx() -> RequestContext:
    return RequestContext(user_id=OTHER_USER_ID)


@pytest.fixture
def extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def store(tmp_path: Path) -> LocalContentStore:
    return LocalContentStore(tmp_path / "uploads")


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings with small limits so validation paths are cheap to hit."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        upload_dir=str(tmp_path / "uploads"),
        max_upload_files=3,
        max_upload_bytes=1024,
        chunk_size=20,
        openai_api_key=None,
    )


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine shared across sessions of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSession(test_engine, expire_on_commit=False) as session:
        yield session


@pytest_asyncio.fixture
async def api_client(
    test_engine: AsyncEngine,
    test_settings: Settings,
    extractor: FakeExtractor,
    store: LocalContentStore,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app with database, extractor and store overridden.

    The completion client defaults to the deterministic stub; tests may set
    ``app.dependency_overrides[get_llm_client]`` to swap it.
    """

    async def _session() -> AsyncGenerator[AsyncSession, None]:
        async with AsyncSession(test_engine, expire_on_commit=False) as session:
            yield session

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_extractor] = lambda: extractor
    app.dependency_overrides[get_content_store] = lambda: store
    app.dependency_overrides[get_llm_client] = DeterministicStubClient

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"Authorization": f"Bearer {TEST_USER_ID}"},
    ) as client:
        yield client

    app.dependency_overrides.clear()
