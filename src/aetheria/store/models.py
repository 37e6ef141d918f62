"""Pydantic models for the session store.

All models are frozen and hold tuples rather than lists, so a state value is
never mutated in place; reducers build new objects instead.
"""

import time
import uuid
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Provider = Literal["Ollama", "LM Studio", "Custom", "Gemini Cloud"]
ResponseFormat = Literal["markdown", "json", "step-by-step"]
MemoryType = Literal["buffer", "summary", "knowledge-graph"]

CLOUD_PROVIDER: Provider = "Gemini Cloud"

# Inclusive numeric bounds for generation settings
TEMPERATURE_RANGE = (0.0, 2.0)
TOP_P_RANGE = (0.0, 1.0)
MAX_TOKENS_RANGE = (128, 4096)

# Tool toggle name -> settings flag
TOOL_FLAGS = {
    "webSearch": "web_search_enabled",
    "reasoning": "reasoning_enabled",
    "voice": "voice_response_enabled",
    "calculator": "calculator_enabled",
    "code": "code_enabled",
    "knowledge": "knowledge_enabled",
}


def new_id() -> str:
    """Generate a short random identifier."""
    return uuid.uuid4().hex[:12]


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def _clamp(value: Any, low: float, high: float) -> Any:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return value  # left for pydantic to reject
    return min(max(value, low), high)


class FrozenModel(BaseModel):
    """Base for immutable store models."""

    model_config = ConfigDict(frozen=True)


class ConnectionStatus(str, Enum):
    """Reachability of a connection."""

    ONLINE = "online"
    OFFLINE = "offline"
    CHECKING = "checking"


class Role(str, Enum):
    """Message author."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class UserRole(str, Enum):
    """Account role of the local user."""

    ADMIN = "Admin"
    USER = "User"
    VIEWER = "Viewer"


class Connection(FrozenModel):
    """A configured pointer to a running inference backend."""

    id: str = Field(default_factory=new_id)
    name: str = "Primary Engine"
    provider: Provider = "Ollama"
    base_url: str
    api_key: str | None = None
    model_id: str = ""
    context_window: int = Field(default=4096, ge=1)
    status: ConnectionStatus = ConnectionStatus.CHECKING

    @property
    def is_cloud(self) -> bool:
        return self.provider == CLOUD_PROVIDER


class Message(FrozenModel):
    """A chat message."""

    id: str = Field(default_factory=new_id)
    role: Role
    content: str = ""
    timestamp: int = Field(default_factory=now_ms)


class SessionSettings(FrozenModel):
    """Per-session generation settings and tool flags.

    Numeric values outside their bounds are clamped into range.
    """

    temperature: float = Field(default=0.7, ge=TEMPERATURE_RANGE[0], le=TEMPERATURE_RANGE[1])
    top_p: float = Field(default=0.9, ge=TOP_P_RANGE[0], le=TOP_P_RANGE[1])
    max_tokens: int = Field(default=1024, ge=MAX_TOKENS_RANGE[0], le=MAX_TOKENS_RANGE[1])
    format: ResponseFormat = "markdown"
    memory_type: MemoryType = "buffer"
    enabled_tools: tuple[str, ...] = ()
    web_search_enabled: bool = False
    reasoning_enabled: bool = False
    voice_response_enabled: bool = False
    calculator_enabled: bool = False
    code_enabled: bool = False
    knowledge_enabled: bool = False

    @field_validator("temperature", mode="before")
    @classmethod
    def _clamp_temperature(cls, v: Any) -> Any:
        return _clamp(v, *TEMPERATURE_RANGE)

    @field_validator("top_p", mode="before")
    @classmethod
    def _clamp_top_p(cls, v: Any) -> Any:
        return _clamp(v, *TOP_P_RANGE)

    @field_validator("max_tokens", mode="before")
    @classmethod
    def _clamp_max_tokens(cls, v: Any) -> Any:
        clamped = _clamp(v, *MAX_TOKENS_RANGE)
        return int(round(clamped)) if isinstance(clamped, float) else clamped


class Session(FrozenModel):
    """A conversation inside a workspace."""

    id: str = Field(default_factory=new_id)
    workspace_id: str
    title: str = "New Conversation"
    messages: tuple[Message, ...] = ()
    persona_id: str | None = None
    framework_id: str | None = None
    linguistic_id: str | None = None
    settings: SessionSettings = Field(default_factory=SessionSettings)


class Persona(FrozenModel):
    """Reusable system prompt defining assistant identity."""

    id: str = Field(default_factory=new_id)
    name: str
    category: str = "Custom"
    description: str = ""
    system_prompt: str
    tags: tuple[str, ...] = ()
    default_temp: float | None = None
    is_custom: bool = False


class Framework(FrozenModel):
    """Reusable instruction fragment defining a reasoning approach."""

    id: str = Field(default_factory=new_id)
    name: str
    category: str = "Custom"
    description: str = ""
    content: str
    complexity: Literal["Beginner", "Intermediate", "Advanced"] = "Intermediate"
    is_custom: bool = False


class LinguisticControl(FrozenModel):
    """Reusable instruction fragment constraining output style."""

    id: str = Field(default_factory=new_id)
    name: str
    category: str = "Custom"
    description: str = ""
    system_instruction: str
    format: ResponseFormat | None = None
    is_custom: bool = False


class Workspace(FrozenModel):
    """A group of sessions."""

    id: str = Field(default_factory=new_id)
    name: str
    icon: str = "zap"
    description: str = ""


DEFAULT_WORKSPACES = (
    Workspace(
        id="ws-1",
        name="General Assistant",
        icon="zap",
        description="Default multipurpose workspace",
    ),
    Workspace(
        id="ws-2",
        name="Academic Research",
        icon="book",
        description="Papers and thesis management",
    ),
)


class AppState(FrozenModel):
    """Complete session store snapshot."""

    workspaces: tuple[Workspace, ...] = DEFAULT_WORKSPACES
    active_workspace_id: str | None = "ws-1"
    connections: tuple[Connection, ...] = ()
    active_connection_id: str | None = None
    sessions: tuple[Session, ...] = ()
    active_session_id: str | None = None
    personas: tuple[Persona, ...] = ()
    frameworks: tuple[Framework, ...] = ()
    linguistic_controls: tuple[LinguisticControl, ...] = ()
    role: UserRole = UserRole.USER
    is_configured: bool = False

    def find_session(self, session_id: str) -> Session | None:
        return next((s for s in self.sessions if s.id == session_id), None)

    @property
    def active_session(self) -> Session | None:
        if self.active_session_id is None:
            return None
        return self.find_session(self.active_session_id)

    @property
    def active_connection(self) -> Connection | None:
        """The selected connection, falling back to the first one."""
        for conn in self.connections:
            if conn.id == self.active_connection_id:
                return conn
        return self.connections[0] if self.connections else None
