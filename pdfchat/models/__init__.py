"""Models package - re-exports for convenience."""

from pdfchat.models.chat import ChatMessage, ChatSession, Rating, SessionSummary
from pdfchat.models.completion import CompletionAnswer, CompletionResult, NoCompletion
from pdfchat.models.documents import ChunkingStatus, DocChunk, UserDocument

__all__ = [
    "ChatMessage",
    "ChatSession",
    "ChunkingStatus",
    "CompletionAnswer",
    "CompletionResult",
    "DocChunk",
    "NoCompletion",
    "Rating",
    "SessionSummary",
    "UserDocument",
]
