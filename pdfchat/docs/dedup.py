"""Content hashing and duplicate detection for uploads."""

import hashlib
from collections.abc import Iterable
from enum import Enum

from pdfchat.models.documents import UserDocument


class UploadDecision(str, Enum):
    """Outcome of checking an upload against the caller's catalog."""

    new = "new"
    new_version = "new_version"
    duplicate = "duplicate"


def content_digest(data: bytes) -> str:
    """SHA-256 hex digest of the uploaded bytes (64 characters)."""
    return hashlib.sha256(data).hexdigest()


def classify_upload(
    catalog: Iterable[UserDocument],
    *,
    original_name: str,
    size_bytes: int,
) -> UploadDecision:
    """Decide whether an upload is new, a new version, or a duplicate.

    Matching is by declared name and byte size only. The content digest is
    stored on the document but does not take part in this decision.
    """
    same_name = [doc for doc in catalog if doc.original_name == original_name]
    if not same_name:
        return UploadDecision.new
    if any(doc.size_bytes == size_bytes for doc in same_name):
        return UploadDecision.duplicate
    return UploadDecision.new_version
