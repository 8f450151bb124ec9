"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18

Creates:
- document (per-user catalog)
- doc_chunk
- chat_session
- chat_history, chat_message (ledger)
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all tables."""
    # document table
    op.create_table(
        "document",
        sa.Column("document_id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("original_name", sa.Text(), nullable=False),
        sa.Column("filename", sa.Text(), nullable=False),
        sa.Column("path", sa.Text(), nullable=False),
        sa.Column("size_bytes", sa.Integer(), nullable=False),
        sa.Column("content_hash", sa.Text(), nullable=False),
        sa.Column("chunking_status", sa.Text(), server_default="pending", nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_document_user_name", "document", ["user_id", "original_name"])
    op.create_index("idx_document_hash", "document", ["content_hash"])

    # doc_chunk table
    op.create_table(
        "doc_chunk",
        sa.Column("chunk_id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("document_id", sa.Uuid(), nullable=False),
        sa.Column("chunk_index", sa.Integer(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["document_id"], ["document.document_id"], ondelete="CASCADE"),
        sa.UniqueConstraint("document_id", "chunk_index", name="uq_chunk_doc_index"),
    )
    op.create_index("idx_chunk_user_doc", "doc_chunk", ["user_id", "document_id"])

    # chat_session table
    op.create_table(
        "chat_session",
        sa.Column("session_id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("document_ids", sa.JSON(), nullable=False),
        sa.Column("archived", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_session_user", "chat_session", ["user_id", "created_at"])

    # chat_history table
    op.create_table(
        "chat_history",
        sa.Column("history_id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("session_id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["session_id"], ["chat_session.session_id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "session_id", name="uq_history_user_session"),
    )

    # chat_message table
    op.create_table(
        "chat_message",
        sa.Column("message_id", sa.Uuid(), primary_key=True),
        sa.Column("history_id", sa.Uuid(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("answer", sa.Text(), nullable=False),
        sa.Column("rating", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["history_id"], ["chat_history.history_id"], ondelete="CASCADE"),
        sa.UniqueConstraint("history_id", "position", name="uq_message_history_position"),
        sa.CheckConstraint("rating IN ('up', 'down')", name="ck_message_rating"),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("chat_message")
    op.drop_table("chat_history")
    op.drop_index("idx_session_user", table_name="chat_session")
    op.drop_table("chat_session")
    op.drop_index("idx_chunk_user_doc", table_name="doc_chunk")
    op.drop_table("doc_chunk")
    op.drop_index("idx_document_hash", table_name="document")
    op.drop_index("idx_document_user_name", table_name="document")
    op.drop_table("document")
