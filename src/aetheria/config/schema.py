"""Pydantic models for aetheria.yaml configuration."""

import os
from typing import Literal

from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """API server configuration."""

    host: str = Field(default="127.0.0.1", description="Server bind address")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed CORS origins (use ['*'] for development only)",
    )


class ClientConfig(BaseModel):
    """Chat client configuration (CLI and orchestrator)."""

    server_url: str = Field(
        default="http://127.0.0.1:8000",
        description="Base URL of the aetheria server exposing /api/chat/stream",
    )
    storage_path: str = Field(
        default="~/.aetheria/storage.json",
        description="File holding the persisted session store",
    )
    stream_timeout: float | None = Field(
        default=None,
        description="Read timeout for streaming responses in seconds (None waits indefinitely)",
        gt=0,
    )


class ProberConfig(BaseModel):
    """Connection prober timeouts."""

    probe_timeout: float = Field(default=5.0, description="Reachability check timeout", gt=0)
    models_timeout: float = Field(default=8.0, description="Model listing timeout", gt=0)
    load_timeout: float = Field(default=30.0, description="Model load request timeout", gt=0)


class CloudConfig(BaseModel):
    """Managed cloud inference (Gemini) configuration."""

    api_key: str | None = Field(
        default_factory=lambda: os.environ.get("GEMINI_API_KEY"),
        description="Gemini API key (defaults to $GEMINI_API_KEY)",
    )
    base_url: str = Field(
        default="https://generativelanguage.googleapis.com",
        description="Generative Language API endpoint",
    )
    model: str = Field(default="gemini-2.5-flash", description="Default cloud chat model")
    title_model: str = Field(
        default="gemini-2.5-flash", description="Model used to title new conversations"
    )
    timeout: int = Field(default=120, description="Request timeout in seconds", ge=1)


class GroundingConfig(BaseModel):
    """Web grounding configuration."""

    max_results: int = Field(default=5, description="Search results injected per turn", ge=1, le=10)


class VoiceConfig(BaseModel):
    """Spoken response configuration."""

    model: str = Field(
        default="gemini-2.5-flash-preview-tts", description="Speech synthesis model"
    )
    voice: str = Field(default="Algenib", description="Prebuilt voice name")
    playback: bool = Field(default=True, description="Play synthesized audio on this machine")


class SessionDefaults(BaseModel):
    """Generation settings given to new sessions."""

    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    top_p: float = Field(default=0.9, ge=0.0, le=1.0)
    max_tokens: int = Field(default=1024, ge=128, le=4096)
    persona_id: str = Field(default="scholar", description="Persona applied to new sessions")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


class AetheriaConfig(BaseModel):
    """Root configuration schema for Aetheria."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    prober: ProberConfig = Field(default_factory=ProberConfig)
    cloud: CloudConfig = Field(default_factory=CloudConfig)
    grounding: GroundingConfig = Field(default_factory=GroundingConfig)
    voice: VoiceConfig = Field(default_factory=VoiceConfig)
    defaults: SessionDefaults = Field(default_factory=SessionDefaults)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
