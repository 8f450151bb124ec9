"""Retrieval engine - pick the chunks that ground an answer."""

import re
from collections.abc import Sequence
from typing import Protocol

from pydantic import BaseModel

from pdfchat.models.documents import DocChunk

CHUNK_SEPARATOR = "\n\n"

_NON_WORD = re.compile(r"\W+")


class RetrievalResult(BaseModel):
    """Grounding text plus the chunks it was built from."""

    text: str
    chunks: list[DocChunk]
    matched: bool  # False when no chunk matched and the full set was used


class Retriever(Protocol):
    """Protocol for turning a question and a chunk set into grounding text."""

    def retrieve(self, question: str, chunks: Sequence[DocChunk]) -> RetrievalResult:
        """Select grounding chunks for ``question``.

        Args:
            question: User question
            chunks: Session chunk set, already in retrieval order

        Returns:
            RetrievalResult whose text is non-empty whenever ``chunks`` is
        """
        ...


def tokenize_question(question: str) -> list[str]:
    """Lower-case the question and split it on runs of non-word characters.

    Empty tokens are dropped on purpose: an empty string is a substring of every
    chunk, so keeping one would make any question with leading or trailing
    punctuation match every chunk.
    """
    return [token for token in _NON_WORD.split(question.lower()) if token]


class SubstringRetriever:
    """Keeps chunks whose text contains any question token as a substring.

    Matching is plain containment, not word-boundary matching, so "art" also
    matches "start". When nothing matches, every chunk is returned. The result
    is not size-capped.
    """

    def retrieve(self, question: str, chunks: Sequence[DocChunk]) -> RetrievalResult:
        tokens = tokenize_question(question)

        relevant = [
            chunk
            for chunk in chunks
            if any(token in chunk.text.lower() for token in tokens)
        ]

        selected = relevant if relevant else list(chunks)
        return RetrievalResult(
            text=CHUNK_SEPARATOR.join(chunk.text for chunk in selected),
            chunks=selected,
            matched=bool(relevant),
        )


def get_retriever() -> Retriever:
    """FastAPI dependency for the retrieval engine."""
    return SubstringRetriever()
