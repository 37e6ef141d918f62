"""Incremental reader for ``data:``-framed chat event streams."""

import codecs
import json
import logging
from collections.abc import AsyncIterable, Callable
from typing import Any

from aetheria.errors import StreamError

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


def extract_delta(payload: Any) -> str:
    """Return the first choice's incremental text, or "" if there is none."""
    if not isinstance(payload, dict):
        return ""
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return ""
    content = delta.get("content")
    return content if isinstance(content, str) else ""


class StreamConsumer:
    """Accumulates streamed deltas and reports each intermediate value."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    async def consume(
        self,
        chunks: AsyncIterable[bytes | str],
        on_update: Callable[[str], Any] | None = None,
    ) -> str:
        """Read an event stream to completion.

        Lines may be split across chunks, and multi-byte characters may be
        split across chunk boundaries. Every non-empty delta triggers
        ``on_update`` with the full text accumulated so far.

        Args:
            chunks: Raw body chunks
            on_update: Called with the accumulated text after each fragment

        Returns:
            Final accumulated text

        Raises:
            StreamError: If the stream carries an ``{"error": ...}`` event
        """
        decoder = codecs.getincrementaldecoder(self.encoding)(errors="replace")
        buffer = ""
        accumulated = ""

        async for chunk in chunks:
            text = decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
            buffer += text
            *lines, buffer = buffer.split("\n")
            for line in lines:
                done, accumulated = self._handle_line(line, accumulated, on_update)
                if done:
                    return accumulated

        buffer += decoder.decode(b"", final=True)
        if buffer:
            _, accumulated = self._handle_line(buffer, accumulated, on_update)
        return accumulated

    def _handle_line(
        self,
        line: str,
        accumulated: str,
        on_update: Callable[[str], Any] | None,
    ) -> tuple[bool, str]:
        line = line.rstrip("\r")
        if not line.startswith(DATA_PREFIX):
            return False, accumulated

        data = line[len(DATA_PREFIX) :].strip()
        if data == DONE_SENTINEL:
            return True, accumulated

        try:
            payload = json.loads(data)
        except json.JSONDecodeError:
            logger.debug("Skipping malformed stream event: %s", data[:200])
            return False, accumulated

        if isinstance(payload, dict) and payload.get("error"):
            raise StreamError(str(payload["error"]))

        delta = extract_delta(payload)
        if delta:
            accumulated += delta
            if on_update is not None:
                on_update(accumulated)
        return False, accumulated
