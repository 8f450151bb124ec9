"""Local filesystem content store for uploaded bytes."""

import logging
import re
import time
import uuid
from dataclasses import dataclass
from pathlib import Path

from pdfchat.config import get_settings
from pdfchat.db.context import RequestContext

logger = logging.getLogger(__name__)

_STAGING_DIR = ".staging"


@dataclass(frozen=True)
class StoredFile:
    """Location of a relocated upload."""

    filename: str
    path: str  # web path, e.g. /uploads/<user_id>/<filename>
    disk_path: Path


def stored_filename(original_name: str, *, now_ms: int | None = None) -> str:
    """Build ``<epoch_ms>-<base><ext>`` with whitespace runs replaced by ``_``."""
    name = Path(original_name).name
    suffix = Path(name).suffix
    base = name[: len(name) - len(suffix)] if suffix else name
    base = re.sub(r"\s+", "_", base)
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{stamp}-{base}{suffix}"


class LocalContentStore:
    """Holds raw uploaded bytes under ``<root>/<user_id>/``.

    Uploads are first written to a staging area; they are moved into the
    user's directory only once the document is registered.
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    def _user_dir(self, ctx: RequestContext) -> Path:
        return self._root / str(ctx.user_id)

    def stage(self, ctx: RequestContext, data: bytes) -> Path:
        """Write bytes to a temp location and return its path."""
        staging = self._root / _STAGING_DIR / str(ctx.user_id)
        staging.mkdir(parents=True, exist_ok=True)
        temp_path = staging / f"{uuid.uuid4().hex}.part"
        temp_path.write_bytes(data)
        return temp_path

    def promote(self, ctx: RequestContext, temp_path: Path, original_name: str) -> StoredFile:
        """Move staged bytes into the user's directory."""
        user_dir = self._user_dir(ctx)
        user_dir.mkdir(parents=True, exist_ok=True)
        filename = stored_filename(original_name)
        disk_path = user_dir / filename
        temp_path.replace(disk_path)
        return StoredFile(
            filename=filename,
            path=f"/uploads/{ctx.user_id}/{filename}",
            disk_path=disk_path,
        )

    def discard(self, path: Path) -> None:
        """Remove a staged or promoted file if it is still there."""
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.warning(f"Could not remove leftover upload bytes at {path}", exc_info=True)

    def remove(self, ctx: RequestContext, filename: str) -> None:
        """Remove a stored document's bytes."""
        self.discard(self._user_dir(ctx) / Path(filename).name)


def get_content_store() -> LocalContentStore:
    """FastAPI dependency for the content store."""
    return LocalContentStore(Path(get_settings().upload_dir))
