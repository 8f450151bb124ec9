"""Per-request identity."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class RequestContext:
    """Authenticated caller. Catalogs, chunks, sessions and ledgers are keyed by ``user_id``."""

    user_id: UUID
