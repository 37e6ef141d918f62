"""Client-side chat turn pipeline.

One turn: append the user message and an empty assistant placeholder,
compose the system prompt from the session's presets, POST the request to
the streaming endpoint, and write every streamed fragment into the
placeholder until the stream ends.
"""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

import httpx

from aetheria.chat.stream import StreamConsumer
from aetheria.chat.titles import TitleGenerator
from aetheria.chat.turn import TurnTracker
from aetheria.errors import DispatchError, SessionNotFoundError
from aetheria.prompts.composer import compose
from aetheria.store.models import Message, Role, Session
from aetheria.store.state import SessionStore
from aetheria.voice.speech import SpeechService

logger = logging.getLogger(__name__)

FAILURE_MARKER = "ERROR:"
STREAM_PATH = "/api/chat/stream"


def _error_text(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return "Stream Initialization Failed"


class ChatOrchestrator:
    """Runs chat turns against the streaming endpoint and records them in the store."""

    def __init__(
        self,
        store: SessionStore,
        http: httpx.AsyncClient,
        consumer: StreamConsumer | None = None,
        speech: SpeechService | None = None,
        titles: TitleGenerator | None = None,
        turns: TurnTracker | None = None,
    ):
        """Initialize orchestrator.

        Args:
            store: Session store receiving messages and titles
            http: Client whose base URL points at the aetheria server
            consumer: Event stream reader
            speech: Speaks finished responses when a session enables voice
            titles: Names new conversations after their first message
            turns: Per-session turn state machine (shared with the store by default)
        """
        self.store = store
        self.http = http
        self.consumer = consumer or StreamConsumer()
        self.speech = speech
        self.titles = titles
        self.turns = turns or store.turns
        self._background: set[asyncio.Task] = set()

    def build_payload(self, session: Session, text: str) -> dict[str, Any]:
        """Request body for the streaming endpoint.

        The composed system prompt comes first, then the prior history
        (empty assistant messages skipped), then the new user text.
        """
        state = self.store.state
        persona = next((p for p in state.personas if p.id == session.persona_id), None)
        if persona is None:
            persona = state.personas[0]
        framework = next((f for f in state.frameworks if f.id == session.framework_id), None)
        linguistic = next(
            (c for c in state.linguistic_controls if c.id == session.linguistic_id), None
        )

        messages = [{"role": "system", "content": compose(persona, framework, linguistic)}]
        for msg in session.messages:
            if msg.role is Role.ASSISTANT and not msg.content.strip():
                continue
            messages.append({"role": msg.role.value, "content": msg.content})
        messages.append({"role": "user", "content": text})

        settings = session.settings
        connection = state.active_connection
        return {
            "baseUrl": connection.base_url if connection else "",
            "modelId": connection.model_id if connection else "",
            "provider": connection.provider if connection else None,
            "apiKey": connection.api_key if connection else None,
            "messages": messages,
            "settings": {
                "temperature": settings.temperature,
                "topP": settings.top_p,
                "maxTokens": settings.max_tokens,
                "webSearchEnabled": settings.web_search_enabled,
                "reasoningEnabled": settings.reasoning_enabled,
            },
        }

    async def send(self, session_id: str, text: str) -> Message | None:
        """Run one chat turn.

        Args:
            session_id: Target session
            text: User input

        Returns:
            The final assistant message, or None for blank input

        Raises:
            SessionNotFoundError: If the session does not exist
            TurnInProgressError: If the session already has a turn in flight
        """
        if not text.strip():
            return None

        session = self.store.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        self.turns.begin(session_id)

        try:
            if not session.messages and self.titles is not None:
                self._schedule_title(session_id, text)

            payload = self.build_payload(session, text)
            placeholder = Message(role=Role.ASSISTANT)
            self.store.append_message(session_id, Message(role=Role.USER, content=text))
            self.store.append_message(session_id, placeholder)

            final = ""
            try:
                final = await self._stream(session_id, placeholder.id, payload)
            except Exception as e:
                logger.error(f"Chat turn failed for session {session_id}: {e}")
                reason = str(e) or "Node connection failure."
                self.store.patch_message_content(
                    session_id, placeholder.id, f"{FAILURE_MARKER} {reason}"
                )
        finally:
            self.turns.finish(session_id)
            self.store.flush()

        if final and self.speech and session.settings.voice_response_enabled:
            self._spawn(self.speech.speak(final))
        return self.store.get_message(session_id, placeholder.id)

    async def regenerate(self, session_id: str) -> Message | None:
        """Re-send the most recent user message."""
        session = self.store.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        last_user = next((m for m in reversed(session.messages) if m.role is Role.USER), None)
        if last_user is None:
            return None
        return await self.send(session_id, last_user.content)

    async def _stream(self, session_id: str, message_id: str, payload: dict[str, Any]) -> str:
        def on_update(text: str) -> None:
            self.store.patch_message_content(session_id, message_id, text)

        async with self.http.stream("POST", STREAM_PATH, json=payload) as response:
            if not response.is_success:
                await response.aread()
                raise DispatchError(_error_text(response), response.status_code)
            self.turns.streaming(session_id)
            return await self.consumer.consume(response.aiter_bytes(), on_update)

    def _schedule_title(self, session_id: str, text: str) -> None:
        self._spawn(self._set_title(session_id, text))

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _set_title(self, session_id: str, text: str) -> None:
        title = await self.titles.generate(text)
        self.store.set_title(session_id, title)

    async def wait_for_background(self) -> None:
        """Wait for pending title and speech tasks."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
