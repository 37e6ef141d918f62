"""Pure state transitions for the session store.

Every function takes an :class:`AppState` and returns a new one; inputs are
never modified. Untouched sessions, messages and connections are shared
between the old and new snapshot, changed ones are rebuilt, so observers can
detect changes by identity.
"""

from collections.abc import Callable
from typing import Any

from aetheria.errors import PresetNotFoundError, SessionNotFoundError
from aetheria.store.models import (
    TOOL_FLAGS,
    AppState,
    Connection,
    ConnectionStatus,
    Framework,
    LinguisticControl,
    Message,
    Persona,
    Role,
    Session,
    SessionSettings,
    UserRole,
    Workspace,
)

# Sentinel for "leave this preset reference unchanged"
KEEP: Any = object()


def _update_session(
    state: AppState, session_id: str, change: Callable[[Session], Session]
) -> AppState:
    found = False
    sessions = []
    for session in state.sessions:
        if session.id == session_id:
            session = change(session)
            found = True
        sessions.append(session)
    if not found:
        raise SessionNotFoundError(session_id)
    return state.model_copy(update={"sessions": tuple(sessions)})


# Workspaces


def add_workspace(state: AppState, workspace: Workspace) -> AppState:
    return state.model_copy(update={"workspaces": (*state.workspaces, workspace)})


def select_workspace(state: AppState, workspace_id: str) -> AppState:
    if not any(w.id == workspace_id for w in state.workspaces):
        raise KeyError(f"Unknown workspace: {workspace_id}")
    return state.model_copy(update={"active_workspace_id": workspace_id})


# Sessions


def create_session(
    state: AppState,
    workspace_id: str,
    session_id: str | None = None,
    settings: SessionSettings | None = None,
    persona_id: str | None = None,
) -> AppState:
    """Append a new empty session and make it active."""
    fields: dict[str, Any] = {"workspace_id": workspace_id}
    if session_id:
        fields["id"] = session_id
    if settings is not None:
        fields["settings"] = settings
    if persona_id is None and state.personas:
        persona_id = state.personas[0].id
    fields["persona_id"] = persona_id

    session = Session(**fields)
    return state.model_copy(
        update={"sessions": (*state.sessions, session), "active_session_id": session.id}
    )


def select_session(state: AppState, session_id: str | None) -> AppState:
    if session_id is not None and state.find_session(session_id) is None:
        raise SessionNotFoundError(session_id)
    return state.model_copy(update={"active_session_id": session_id})


def ensure_session(state: AppState, workspace_id: str, **session_fields: Any) -> AppState:
    """Guarantee the workspace has a session, creating one if needed.

    The workspace's most recent session becomes active when one exists.
    """
    existing = [s for s in state.sessions if s.workspace_id == workspace_id]
    if existing:
        active = state.active_session
        if active is not None and active.workspace_id == workspace_id:
            return state
        return state.model_copy(update={"active_session_id": existing[-1].id})
    return create_session(state, workspace_id, **session_fields)


def set_title(state: AppState, session_id: str, title: str) -> AppState:
    title = title.strip() or "New Conversation"
    return _update_session(state, session_id, lambda s: s.model_copy(update={"title": title}))


# Messages


def append_message(state: AppState, session_id: str, message: Message) -> AppState:
    return _update_session(
        state,
        session_id,
        lambda s: s.model_copy(update={"messages": (*s.messages, message)}),
    )


def patch_message_content(
    state: AppState, session_id: str, message_id: str, content: str
) -> AppState:
    """Replace the content of the reply currently streaming in.

    Only the session's latest message may be patched, and only when it is an
    assistant message; user messages and earlier replies are immutable.

    Raises:
        KeyError: If the message is not in the session
        ValueError: If the message is not the latest assistant message
    """

    def change(session: Session) -> Session:
        target = next((m for m in session.messages if m.id == message_id), None)
        if target is None:
            raise KeyError(f"Unknown message {message_id} in session {session_id}")
        if target.role is not Role.ASSISTANT or session.messages[-1] is not target:
            raise ValueError(f"Message {message_id} is not the streaming reply")
        patched = target.model_copy(update={"content": content})
        return session.model_copy(update={"messages": (*session.messages[:-1], patched)})

    return _update_session(state, session_id, change)


# Settings and presets


def patch_settings(state: AppState, session_id: str, **changes: Any) -> AppState:
    """Merge setting changes; numeric values are clamped into their bounds."""

    def change(session: Session) -> Session:
        merged = {**session.settings.model_dump(), **changes}
        return session.model_copy(update={"settings": SessionSettings.model_validate(merged)})

    return _update_session(state, session_id, change)


def apply_presets(
    state: AppState,
    session_id: str,
    persona_id: str | None = KEEP,
    framework_id: str | None = KEEP,
    linguistic_id: str | None = KEEP,
) -> AppState:
    """Point a session at library presets by id.

    Pass ``None`` to clear a framework or linguistic reference; omitted
    arguments are left as they are. Applying a linguistic control that
    declares an output format also switches the session format.
    """
    update: dict[str, Any] = {}
    format_change = None

    if persona_id is not KEEP:
        if persona_id is not None and not any(p.id == persona_id for p in state.personas):
            raise PresetNotFoundError("persona", persona_id)
        update["persona_id"] = persona_id
    if framework_id is not KEEP:
        if framework_id is not None and not any(f.id == framework_id for f in state.frameworks):
            raise PresetNotFoundError("framework", framework_id)
        update["framework_id"] = framework_id
    if linguistic_id is not KEEP:
        if linguistic_id is not None:
            control = next((c for c in state.linguistic_controls if c.id == linguistic_id), None)
            if control is None:
                raise PresetNotFoundError("linguistic control", linguistic_id)
            format_change = control.format
        update["linguistic_id"] = linguistic_id

    def change(session: Session) -> Session:
        if format_change is not None:
            update["settings"] = session.settings.model_copy(update={"format": format_change})
        return session.model_copy(update=update)

    return _update_session(state, session_id, change)


def toggle_tool(state: AppState, session_id: str, tool: str) -> AppState:
    """Flip a tool flag and keep ``enabled_tools`` in sync."""
    flag = TOOL_FLAGS.get(tool)
    if flag is None:
        raise KeyError(f"Unknown tool: {tool}")

    def change(session: Session) -> Session:
        enabled = not getattr(session.settings, flag)
        tools = [t for t in session.settings.enabled_tools if t != tool]
        if enabled:
            tools.append(tool)
        settings = session.settings.model_copy(
            update={flag: enabled, "enabled_tools": tuple(tools)}
        )
        return session.model_copy(update={"settings": settings})

    return _update_session(state, session_id, change)


# Connections


def add_connection(state: AppState, connection: Connection) -> AppState:
    return state.model_copy(
        update={
            "connections": (*state.connections, connection),
            "active_connection_id": state.active_connection_id or connection.id,
        }
    )


def update_connection(state: AppState, connection_id: str, **changes: Any) -> AppState:
    if not any(c.id == connection_id for c in state.connections):
        raise KeyError(f"Unknown connection: {connection_id}")
    connections = tuple(
        Connection.model_validate({**c.model_dump(), **changes}) if c.id == connection_id else c
        for c in state.connections
    )
    return state.model_copy(update={"connections": connections})


def set_connection_status(
    state: AppState, connection_id: str, status: ConnectionStatus
) -> AppState:
    return update_connection(state, connection_id, status=status)


def set_active_connection(state: AppState, connection_id: str | None) -> AppState:
    if connection_id is not None and not any(c.id == connection_id for c in state.connections):
        raise KeyError(f"Unknown connection: {connection_id}")
    return state.model_copy(update={"active_connection_id": connection_id})


def complete_initial_setup(state: AppState, base_url: str, model_id: str) -> AppState:
    """Replace connections with the single engine chosen during setup."""
    connection = Connection(
        id="default-conn",
        name="Primary Engine",
        provider="Ollama",
        base_url=base_url,
        model_id=model_id,
        context_window=4096,
        status=ConnectionStatus.CHECKING,
    )
    return state.model_copy(
        update={
            "connections": (connection,),
            "active_connection_id": connection.id,
            "is_configured": True,
        }
    )


# Preset library (custom entries only)


def _add_custom(state: AppState, field: str, preset: Any) -> AppState:
    preset = preset.model_copy(update={"is_custom": True})
    return state.model_copy(update={field: (*getattr(state, field), preset)})


def _update_custom(
    state: AppState, field: str, kind: str, preset_id: str, changes: dict
) -> AppState:
    presets = getattr(state, field)
    target = next((p for p in presets if p.id == preset_id), None)
    if target is None:
        raise PresetNotFoundError(kind, preset_id)
    if not target.is_custom:
        raise ValueError(f"Built-in {kind} '{preset_id}' cannot be edited")
    changes = {k: v for k, v in changes.items() if k not in ("id", "is_custom")}
    updated = type(target).model_validate({**target.model_dump(), **changes})
    return state.model_copy(
        update={field: tuple(updated if p.id == preset_id else p for p in presets)}
    )


def add_persona(state: AppState, persona: Persona) -> AppState:
    return _add_custom(state, "personas", persona)


def update_persona(state: AppState, persona_id: str, **changes: Any) -> AppState:
    return _update_custom(state, "personas", "persona", persona_id, changes)


def add_framework(state: AppState, framework: Framework) -> AppState:
    return _add_custom(state, "frameworks", framework)


def update_framework(state: AppState, framework_id: str, **changes: Any) -> AppState:
    return _update_custom(state, "frameworks", "framework", framework_id, changes)


def add_linguistic_control(state: AppState, control: LinguisticControl) -> AppState:
    return _add_custom(state, "linguistic_controls", control)


def update_linguistic_control(state: AppState, control_id: str, **changes: Any) -> AppState:
    return _update_custom(state, "linguistic_controls", "linguistic control", control_id, changes)


def set_role(state: AppState, role: UserRole) -> AppState:
    return state.model_copy(update={"role": role})
