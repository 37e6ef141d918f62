"""Observable container for the application state."""

import logging
from collections.abc import Callable
from typing import Any

from aetheria.prompts.library import FRAMEWORKS, LINGUISTIC_CONTROLS, PERSONAS
from aetheria.store import reducers
from aetheria.store.models import (
    AppState,
    Connection,
    ConnectionStatus,
    Framework,
    LinguisticControl,
    Message,
    Persona,
    Session,
    SessionSettings,
    UserRole,
    Workspace,
)
from aetheria.store.persistence import LocalStorage

logger = logging.getLogger(__name__)

Listener = Callable[[AppState, AppState], None]


def initial_state() -> AppState:
    """Fresh state with default workspaces and the built-in preset library."""
    return AppState(
        personas=PERSONAS,
        frameworks=FRAMEWORKS,
        linguistic_controls=LINGUISTIC_CONTROLS,
    )


class SessionStore:
    """Holds the current AppState and notifies subscribers on every change.

    All mutations go through pure functions in :mod:`aetheria.store.reducers`;
    the store swaps in the returned snapshot, persists it when storage is
    attached, then calls each listener with ``(new_state, old_state)``.
    Streaming content patches are only marked dirty and written by
    :meth:`flush` or the next persisted mutation.
    """

    def __init__(self, state: AppState | None = None, storage: LocalStorage | None = None):
        from aetheria.chat.turn import TurnTracker

        self.storage = storage
        if state is None:
            base = initial_state()
            state = (storage.load_state(base) if storage else None) or base
        self._state = state
        self._listeners: list[Listener] = []
        self._dirty = False
        self.turns: TurnTracker = TurnTracker()

    @property
    def state(self) -> AppState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def flush(self) -> None:
        """Write pending streaming patches to storage."""
        if self._dirty:
            self._save(self._state)

    def _save(self, state: AppState) -> None:
        if self.storage is None:
            return
        try:
            self.storage.save(state)
        except OSError as e:
            logger.warning(f"Failed to persist state: {e}")
            return
        self._dirty = False

    def _apply(
        self,
        reducer: Callable[..., AppState],
        *args: Any,
        persist: bool = True,
        **kwargs: Any,
    ) -> AppState:
        old = self._state
        new = reducer(old, *args, **kwargs)
        if new is old:
            return new
        self._state = new

        if persist:
            self._save(new)
        elif self.storage is not None:
            self._dirty = True

        for listener in list(self._listeners):
            try:
                listener(new, old)
            except Exception:
                logger.exception("State listener failed")
        return new

    # Lookups

    def get_session(self, session_id: str) -> Session | None:
        return self._state.find_session(session_id)

    def get_message(self, session_id: str, message_id: str) -> Message | None:
        session = self.get_session(session_id)
        if session is None:
            return None
        return next((m for m in session.messages if m.id == message_id), None)

    # Workspaces

    def add_workspace(self, workspace: Workspace) -> None:
        self._apply(reducers.add_workspace, workspace)

    def select_workspace(self, workspace_id: str) -> None:
        self._apply(reducers.select_workspace, workspace_id)

    # Sessions

    def create_session(
        self,
        workspace_id: str | None = None,
        settings: SessionSettings | None = None,
        persona_id: str | None = None,
    ) -> Session:
        """Create a session (in the active workspace by default) and return it."""
        workspace_id = workspace_id or self._state.active_workspace_id or "ws-1"
        state = self._apply(
            reducers.create_session, workspace_id, settings=settings, persona_id=persona_id
        )
        return state.sessions[-1]

    def select_session(self, session_id: str | None) -> None:
        self._apply(reducers.select_session, session_id)

    def ensure_session(self, workspace_id: str | None = None) -> Session:
        workspace_id = workspace_id or self._state.active_workspace_id or "ws-1"
        state = self._apply(reducers.ensure_session, workspace_id)
        return state.active_session

    def set_title(self, session_id: str, title: str) -> None:
        self._apply(reducers.set_title, session_id, title)

    # Messages

    def append_message(self, session_id: str, message: Message) -> None:
        self._apply(reducers.append_message, session_id, message)

    def patch_message_content(self, session_id: str, message_id: str, content: str) -> None:
        """Rewrite a streaming reply; persisted on the next flush."""
        self._apply(
            reducers.patch_message_content, session_id, message_id, content, persist=False
        )

    # Settings and presets

    def patch_settings(self, session_id: str, **changes: Any) -> None:
        self._apply(reducers.patch_settings, session_id, **changes)

    def apply_presets(self, session_id: str, **preset_ids: str | None) -> None:
        self._apply(reducers.apply_presets, session_id, **preset_ids)

    def toggle_tool(self, session_id: str, tool: str) -> None:
        self._apply(reducers.toggle_tool, session_id, tool)

    # Connections

    def add_connection(self, connection: Connection) -> None:
        self._apply(reducers.add_connection, connection)

    def update_connection(self, connection_id: str, **changes: Any) -> None:
        self._apply(reducers.update_connection, connection_id, **changes)

    def set_connection_status(self, connection_id: str, status: ConnectionStatus) -> None:
        self._apply(reducers.set_connection_status, connection_id, status)

    def set_active_connection(self, connection_id: str | None) -> None:
        self._apply(reducers.set_active_connection, connection_id)

    def complete_initial_setup(self, base_url: str, model_id: str) -> None:
        self._apply(reducers.complete_initial_setup, base_url, model_id)

    # Custom presets

    def add_persona(self, persona: Persona) -> None:
        self._apply(reducers.add_persona, persona)

    def update_persona(self, persona_id: str, **changes: Any) -> None:
        self._apply(reducers.update_persona, persona_id, **changes)

    def add_framework(self, framework: Framework) -> None:
        self._apply(reducers.add_framework, framework)

    def update_framework(self, framework_id: str, **changes: Any) -> None:
        self._apply(reducers.update_framework, framework_id, **changes)

    def add_linguistic_control(self, control: LinguisticControl) -> None:
        self._apply(reducers.add_linguistic_control, control)

    def update_linguistic_control(self, control_id: str, **changes: Any) -> None:
        self._apply(reducers.update_linguistic_control, control_id, **changes)

    def set_role(self, role: UserRole) -> None:
        self._apply(reducers.set_role, role)
