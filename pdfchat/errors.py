"""Domain error taxonomy.

Routes and services raise these; ``pdfchat.main`` maps them to HTTP responses.
"""


class PdfChatError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PdfChatError):
    """Malformed or disallowed input (bad rating, index, file type/size)."""


class NotFoundError(PdfChatError):
    """Session, history, document or chunks absent for the caller."""


class UpstreamError(PdfChatError):
    """Completion service failed (network, non-2xx, malformed payload).

    ``message`` is safe to show to clients; ``detail`` is for server logs only.
    """

    def __init__(self, message: str = "Completion service unavailable", detail: str = "") -> None:
        super().__init__(message)
        self.detail = detail
