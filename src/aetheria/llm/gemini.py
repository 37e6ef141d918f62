"""Google Gemini LLM client using httpx.

Implements the LLMClient protocol for the Generative Language API
(``generateContent`` / ``streamGenerateContent``) without the Google SDK.
"""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from aetheria.llm.client import CompletionResponse, GenerationSettings, Message

logger = logging.getLogger(__name__)

GEMINI_API_URL = "https://generativelanguage.googleapis.com"
GEMINI_API_VERSION = "v1beta"


def upstream_error_text(response: httpx.Response) -> str:
    """Best human-readable error message from a failed API response."""
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str):
        return error
    return response.text or f"HTTP {response.status_code}"


def _candidate_text(data: dict[str, Any]) -> str:
    parts = []
    for candidate in data.get("candidates") or []:
        content = candidate.get("content") or {}
        for part in content.get("parts") or []:
            if isinstance(part.get("text"), str):
                parts.append(part["text"])
        break  # first candidate only
    return "".join(parts)


class GeminiClient:
    """LLM client for Gemini models."""

    def __init__(
        self,
        api_key: str | None,
        model: str = "gemini-2.5-flash",
        base_url: str = GEMINI_API_URL,
        timeout: int = 120,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize Gemini client.

        Args:
            api_key: Gemini API key
            model: Model name (e.g., "gemini-2.5-flash")
            base_url: API endpoint
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used in tests)
        """
        self.model = model
        self.client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={
                "x-goog-api-key": api_key or "",
                "content-type": "application/json",
            },
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def _convert_messages(
        self, messages: list[Message]
    ) -> tuple[str | None, list[dict[str, Any]]]:
        """Convert internal Message format to Gemini format.

        Gemini takes the system prompt as a separate ``systemInstruction``
        and calls the assistant role "model". The final user message stays
        last in ``contents``.

        Args:
            messages: List of Message objects

        Returns:
            Tuple of (system_instruction, contents)
        """
        system_parts: list[str] = []
        contents: list[dict[str, Any]] = []

        for msg in messages:
            if msg.role == "system":
                if msg.content:
                    system_parts.append(msg.content)
                continue
            role = "model" if msg.role == "assistant" else "user"
            contents.append({"role": role, "parts": [{"text": msg.content}]})

        system = "\n\n".join(system_parts) if system_parts else None
        return system, contents

    def _payload(
        self, messages: list[Message], settings: GenerationSettings | None
    ) -> dict[str, Any]:
        settings = settings or GenerationSettings()
        system, contents = self._convert_messages(messages)
        payload: dict[str, Any] = {
            "contents": contents,
            "generationConfig": {
                "temperature": settings.temperature,
                "topP": settings.top_p,
                "maxOutputTokens": settings.max_tokens,
            },
        }
        if system:
            payload["systemInstruction"] = {"parts": [{"text": system}]}
        return payload

    async def complete(
        self,
        messages: list[Message],
        settings: GenerationSettings | None = None,
    ) -> CompletionResponse:
        """Generate a completion from Gemini.

        Args:
            messages: Conversation history
            settings: Sampling parameters

        Returns:
            CompletionResponse with the generated text
        """
        path = f"/{GEMINI_API_VERSION}/models/{self.model}:generateContent"
        response = await self.client.post(path, json=self._payload(messages, settings))
        response.raise_for_status()
        data = response.json()

        candidates = data.get("candidates") or [{}]
        finish_reason = str(candidates[0].get("finishReason", "STOP")).lower()
        return CompletionResponse(content=_candidate_text(data), finish_reason=finish_reason)

    async def open_stream(
        self,
        messages: list[Message],
        settings: GenerationSettings | None = None,
    ) -> AsyncIterator[str]:
        """Send a streaming request and return an iterator over text fragments.

        Raises:
            httpx.HTTPStatusError: If the API answered with an error status
                (the body has already been read, so ``response.text`` is set)
            httpx.TransportError: If the API could not be reached
        """
        path = f"/{GEMINI_API_VERSION}/models/{self.model}:streamGenerateContent"
        request = self.client.build_request(
            "POST", path, params={"alt": "sse"}, json=self._payload(messages, settings)
        )
        response = await self.client.send(request, stream=True)
        if not response.is_success:
            await response.aread()
            await response.aclose()
            response.raise_for_status()

        async def fragments() -> AsyncIterator[str]:
            try:
                async for line in response.aiter_lines():
                    if not line.startswith("data:"):
                        continue
                    try:
                        data = json.loads(line[5:].strip())
                    except json.JSONDecodeError:
                        logger.debug("Skipping malformed Gemini event: %s", line[:200])
                        continue
                    text = _candidate_text(data)
                    if text:
                        yield text
            finally:
                await response.aclose()

        return fragments()

    async def stream_complete(
        self,
        messages: list[Message],
        settings: GenerationSettings | None = None,
    ) -> AsyncIterator[str]:
        """Stream a completion from Gemini.

        Yields:
            Content chunks as strings
        """
        async for fragment in await self.open_stream(messages, settings):
            yield fragment

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
