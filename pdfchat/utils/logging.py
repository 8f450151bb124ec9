"""Logging setup and structured ingestion logging."""

import logging
from typing import Any

from pdfchat.db.context import RequestContext

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


class StructuredIngestLogger:
    """Structured logger for per-file upload outcomes."""

    def log_file(
        self,
        ctx: RequestContext,
        original_name: str,
        outcome: str,
        *,
        size_bytes: int,
        document_id: str | None = None,
        chunk_count: int | None = None,
        error_reason: str | None = None,
    ) -> None:
        """Log one file's ingestion outcome with structured data."""
        log_data: dict[str, Any] = {
            "user_id": str(ctx.user_id),
            "file": original_name,
            "outcome": outcome,
            "size_bytes": size_bytes,
        }

        if document_id:
            log_data["document_id"] = document_id
        if chunk_count is not None:
            log_data["chunk_count"] = chunk_count
        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Ingest: {original_name} - {outcome}"

        if outcome in ("registered", "duplicate"):
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
