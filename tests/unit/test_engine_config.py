"""Unit tests for settings and database URL resolution."""

import pytest

from pdfchat.config import Settings
from pdfchat.db.engine import resolve_database_url


def test_settings_defaults() -> None:
    settings = Settings(database_url=None, openai_api_key=None)

    assert settings.chunk_size == 2000
    assert settings.max_upload_files == 20
    assert settings.upload_dir == "uploads"
    assert settings.openai_model == "gpt-4o-mini"


def test_resolve_database_url_rewrites_postgres_driver() -> None:
    settings = Settings(database_url="postgresql://u:p@db:5432/app")

    assert resolve_database_url(settings) == "postgresql+asyncpg://u:p@db:5432/app"


def test_resolve_database_url_rewrites_sqlite_driver() -> None:
    settings = Settings(database_url="sqlite:///./pdfchat.db")

    assert resolve_database_url(settings) == "sqlite+aiosqlite:///./pdfchat.db"


def test_resolve_database_url_keeps_explicit_driver() -> None:
    settings = Settings(database_url="sqlite+aiosqlite:///:memory:")

    assert resolve_database_url(settings) == "sqlite+aiosqlite:///:memory:"


def test_resolve_database_url_rejects_placeholder() -> None:
    settings = Settings(database_url=None)

    with pytest.raises(ValueError, match="DATABASE_URL must be set"):
        resolve_database_url(settings)
