"""Completion client for grounded answers with OpenAI / Azure OpenAI integration.

Security: Reads API key from environment only, never hardcoded.
Provides a deterministic stub when no key is present, for development and tests.
"""

import logging
from typing import Protocol, TypedDict

from openai import APIError, AsyncAzureOpenAI, AsyncOpenAI

from pdfchat.config import Settings, get_settings
from pdfchat.errors import UpstreamError
from pdfchat.models.completion import CompletionAnswer, CompletionResult, NoCompletion

logger = logging.getLogger(__name__)


class PromptMessage(TypedDict):
    """One chat-completions message."""

    role: str
    content: str


class CompletionClient(Protocol):
    """Protocol for completion service implementations."""

    async def complete(self, messages: list[PromptMessage]) -> CompletionResult:
        """Run one synchronous (non-streaming) completion.

        Args:
            messages: System instruction followed by the grounded user message

        Returns:
            CompletionAnswer with text, or NoCompletion if nothing usable came back

        Raises:
            UpstreamError: Network failure, non-2xx response or malformed payload
        """
        ...


class DeterministicStubClient:
    """Deterministic stub client (no API key required).

    Echoes the question back.
    """

    async def complete(self, messages: list[PromptMessage]) -> CompletionResult:
        user_content = messages[-1]["content"] if messages else ""
        question = user_content.rsplit("Question: ", 1)[-1].strip()
        if not question:
            return NoCompletion(source="stub")

        return CompletionAnswer(
            text=f"Stub answer to: {question}\n\n*No completion service is configured.*",
            source="stub",
        )


class OpenAICompletionClient:
    """OpenAI-backed completion client (plain OpenAI or Azure OpenAI)."""

    def __init__(
        self,
        client: AsyncOpenAI,
        *,
        model: str,
        max_tokens: int = 1000,
        temperature: float = 0.2,
    ) -> None:
        """Initialize the completion client.

        Args:
            client: Configured SDK client (AsyncOpenAI or AsyncAzureOpenAI)
            model: Model or Azure deployment name
            max_tokens: Completion token cap
            temperature: Sampling temperature
        """
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def complete(self, messages: list[PromptMessage]) -> CompletionResult:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,  # type: ignore[arg-type]
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except APIError as e:
            raise UpstreamError(detail=str(e)) from e

        try:
            choices = response.choices or []
            content = choices[0].message.content if choices else None
        except (AttributeError, TypeError) as e:
            raise UpstreamError(detail=f"Malformed completion payload: {e}") from e

        if not content or not content.strip():
            logger.warning("Completion service returned no answer text")
            return NoCompletion()

        return CompletionAnswer(text=content)


def build_openai_client(settings: Settings) -> AsyncOpenAI:
    """Create the SDK client, preferring Azure when an endpoint is configured."""
    if settings.openai_api_key is None:
        raise ValueError("OPENAI_API_KEY must be set to build an OpenAI client")
    api_key = settings.openai_api_key.get_secret_value()

    if settings.azure_openai_endpoint:
        return AsyncAzureOpenAI(
            api_key=api_key,
            azure_endpoint=settings.azure_openai_endpoint,
            api_version=settings.azure_openai_api_version,
        )
    return AsyncOpenAI(api_key=api_key)


def get_llm_client() -> CompletionClient:
    """Factory function to get appropriate completion client based on config.

    Returns:
        OpenAICompletionClient if API key is configured, DeterministicStubClient otherwise
    """
    settings = get_settings()
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info("Using OpenAI client for completions")
        return OpenAICompletionClient(
            build_openai_client(settings),
            model=settings.openai_model,
            max_tokens=settings.completion_max_tokens,
            temperature=settings.completion_temperature,
        )

    logger.warning("No OpenAI API key configured, using deterministic stub client")
    return DeterministicStubClient()
