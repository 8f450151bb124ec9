"""Typed completion-service results."""

from typing import Literal

from pydantic import BaseModel, Field

NO_ANSWER_TEXT = "No answer from AI"


class CompletionAnswer(BaseModel):
    """The completion service produced answer text."""

    kind: Literal["answer"] = "answer"
    text: str = Field(..., min_length=1)
    source: Literal["openai", "stub"] = "openai"


class NoCompletion(BaseModel):
    """The call succeeded but no usable completion came back."""

    kind: Literal["no_answer"] = "no_answer"
    source: Literal["openai", "stub"] = "openai"


CompletionResult = CompletionAnswer | NoCompletion


def answer_text(result: CompletionResult) -> str:
    """Text to record and return for a completion result."""
    if isinstance(result, CompletionAnswer):
        return result.text
    return NO_ANSWER_TEXT
