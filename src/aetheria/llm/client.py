"""LLM client protocol and data types."""

from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any, Protocol


@dataclass
class Message:
    """A message in the conversation."""

    role: str  # "system", "user", "assistant"
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class GenerationSettings:
    """Sampling parameters forwarded to a backend."""

    temperature: float = 0.7
    top_p: float = 0.9
    max_tokens: int = 1024


@dataclass
class CompletionResponse:
    """Response from LLM completion."""

    content: str
    finish_reason: str = "stop"


class LLMClient(Protocol):
    """Protocol for LLM client implementations."""

    async def complete(
        self,
        messages: list[Message],
        settings: GenerationSettings | None = None,
    ) -> CompletionResponse:
        """Generate a completion from the LLM.

        Args:
            messages: Conversation history
            settings: Sampling parameters (backend defaults when None)

        Returns:
            CompletionResponse with the generated text
        """
        ...

    async def open_stream(
        self,
        messages: list[Message],
        settings: GenerationSettings | None = None,
    ) -> AsyncIterator[str]:
        """Start a streamed completion.

        The upstream request is fully established before this returns, so
        connection and status errors raise here rather than mid-iteration.

        Args:
            messages: Conversation history
            settings: Sampling parameters

        Returns:
            Iterator over content fragments
        """
        ...

    async def stream_complete(
        self,
        messages: list[Message],
        settings: GenerationSettings | None = None,
    ) -> Any:
        """Stream a completion from the LLM.

        Yields:
            Content chunks as they arrive
        """
        ...
