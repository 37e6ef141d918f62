"""Client for local OpenAI-compatible inference servers."""

from collections.abc import AsyncIterator
from typing import Any

import httpx
from openai import AsyncOpenAI

from aetheria.engine.urls import openai_base_url
from aetheria.llm.client import CompletionResponse, GenerationSettings, Message


class OpenAICompatibleClient:
    """LLM client for any OpenAI-compatible inference server.

    Ollama, LM Studio, vLLM and llama.cpp all expose ``/v1/chat/completions``.
    The client never retries on its own; callers decide whether to fall back
    to another address.
    """

    def __init__(
        self,
        model: str,
        base_url: str,
        api_key: str | None = None,
        connect_timeout: float = 10.0,
        read_timeout: float | None = None,
    ) -> None:
        """Initialise the client.

        Args:
            model: Model name served by the backend.
            base_url: Engine base URL; ``/v1`` is appended when missing.
            api_key: API key (local engines ignore this but the SDK requires one).
            connect_timeout: Seconds allowed to establish the connection.
            read_timeout: Seconds allowed between streamed chunks; None waits indefinitely.
        """
        self.model = model
        self.base_url = openai_base_url(base_url)
        self.client = AsyncOpenAI(
            base_url=self.base_url,
            api_key=api_key or "none",
            max_retries=0,
            timeout=httpx.Timeout(read_timeout, connect=connect_timeout),
        )

    def _params(
        self, messages: list[Message], settings: GenerationSettings | None
    ) -> dict[str, Any]:
        settings = settings or GenerationSettings()
        return {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": settings.temperature,
            "top_p": settings.top_p,
            "max_tokens": settings.max_tokens,
        }

    async def complete(
        self,
        messages: list[Message],
        settings: GenerationSettings | None = None,
    ) -> CompletionResponse:
        """Generate a completion.

        Args:
            messages: Conversation history.
            settings: Sampling parameters.

        Returns:
            CompletionResponse with the generated text.
        """
        response = await self.client.chat.completions.create(**self._params(messages, settings))
        choice = response.choices[0]
        return CompletionResponse(
            content=choice.message.content or "",
            finish_reason=choice.finish_reason or "stop",
        )

    async def open_stream(
        self,
        messages: list[Message],
        settings: GenerationSettings | None = None,
    ) -> AsyncIterator[str]:
        """Send the request and return an iterator over content fragments.

        Raises:
            openai.APIConnectionError: If the server could not be reached
            openai.APIStatusError: If the server answered with an error status
        """
        stream = await self.client.chat.completions.create(
            **self._params(messages, settings), stream=True
        )

        async def fragments() -> AsyncIterator[str]:
            async for chunk in stream:
                if chunk.choices and chunk.choices[0].delta.content:
                    yield chunk.choices[0].delta.content

        return fragments()

    async def stream_complete(
        self,
        messages: list[Message],
        settings: GenerationSettings | None = None,
    ) -> AsyncIterator[str]:
        """Stream a completion.

        Yields:
            Content chunks as strings.
        """
        async for fragment in await self.open_stream(messages, settings):
            yield fragment

    async def close(self) -> None:
        await self.client.close()
