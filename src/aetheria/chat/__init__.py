"""Chat turn pipeline.

- :class:`DispatchRouter` - server side; turns a request into one fragment
  stream from a cloud or self-hosted backend
- :class:`StreamConsumer` - client side; reads the event stream incrementally
- :class:`ChatOrchestrator` - client side; runs a turn against the store
"""

from aetheria.chat.dispatch import ChatStreamRequest, DispatchRouter
from aetheria.chat.orchestrator import FAILURE_MARKER, ChatOrchestrator
from aetheria.chat.stream import StreamConsumer, extract_delta
from aetheria.chat.titles import TitleGenerator
from aetheria.chat.turn import TurnState, TurnTracker

__all__ = [
    "FAILURE_MARKER",
    "ChatOrchestrator",
    "ChatStreamRequest",
    "DispatchRouter",
    "StreamConsumer",
    "TitleGenerator",
    "TurnState",
    "TurnTracker",
    "extract_delta",
]
