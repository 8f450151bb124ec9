"""PDF text extraction adapter."""

from typing import Protocol

import fitz  # PyMuPDF


class ExtractionError(Exception):
    """The document bytes could not be parsed as a PDF."""


class TextExtractor(Protocol):
    """Protocol for bytes -> plain text extraction."""

    def extract_text(self, data: bytes) -> str:
        """Return the document's plain text (may be empty)."""
        ...


class PyMuPDFExtractor:
    """Extract text page by page with PyMuPDF."""

    def extract_text(self, data: bytes) -> str:
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except (RuntimeError, ValueError) as e:  # FileDataError subclasses RuntimeError
            raise ExtractionError(f"Unreadable PDF: {e}") from e

        with doc:
            pages = [page.get_text() or "" for page in doc]
        return "\n".join(pages)


def get_extractor() -> TextExtractor:
    """FastAPI dependency for the text extractor."""
    return PyMuPDFExtractor()
