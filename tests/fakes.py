"""Test doubles shared across suites."""

import uuid

from pdfchat.docs.extractor import ExtractionError
from pdfchat.docs.ingest import IncomingFile
from pdfchat.errors import UpstreamError
from pdfchat.llm.client import PromptMessage
from pdfchat.models.completion import CompletionAnswer, CompletionResult, NoCompletion

TEST_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")
OTHER_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000003")

CORRUPT_PDF = b"%PDF-corrupt"


class FakeExtractor:
    """Extractor that decodes the bytes as UTF-8 instead of parsing a PDF.

    ``CORRUPT_PDF`` raises ExtractionError, like a file PyMuPDF cannot open.
    """

    def __init__(self) -> None:
        self.calls = 0

    def extract_text(self, data: bytes) -> str:
        self.calls += 1
        if data == CORRUPT_PDF:
            raise ExtractionError("Unreadable PDF: corrupt")
        return data.decode("utf-8")


class RecordingLLM:
    """Completion client that records prompts and returns a fixed answer."""

    def __init__(self, answer: str = "Paris is the capital.") -> None:
        self.answer = answer
        self.calls: list[list[PromptMessage]] = []

    async def complete(self, messages: list[PromptMessage]) -> CompletionResult:
        self.calls.append(messages)
        return CompletionAnswer(text=self.answer)


class EmptyLLM:
    """Completion client whose calls succeed with no usable answer."""

    async def complete(self, messages: list[PromptMessage]) -> CompletionResult:
        return NoCompletion()


class FailingLLM:
    """Completion client whose calls always fail upstream."""

    async def complete(self, messages: list[PromptMessage]) -> CompletionResult:
        raise UpstreamError(detail="connection reset")


def pdf_file(name: str, text: str) -> IncomingFile:
    """Build an upload whose bytes FakeExtractor turns back into ``text``."""
    return IncomingFile(original_name=name, content_type="application/pdf", data=text.encode())
