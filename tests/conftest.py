"""Pytest configuration and shared fixtures."""

import pytest

from aetheria.config.schema import AetheriaConfig
from aetheria.store.models import Connection, ConnectionStatus
from aetheria.store.state import SessionStore, initial_state


@pytest.fixture
def default_config() -> AetheriaConfig:
    """Provide a default configuration for tests."""
    config = AetheriaConfig()
    config.cloud.api_key = None
    return config


@pytest.fixture
def local_connection() -> Connection:
    """A local engine connection on localhost."""
    return Connection(
        id="conn-1",
        name="Primary Engine",
        provider="Ollama",
        base_url="http://localhost:11434",
        model_id="qwen2.5:7b",
        status=ConnectionStatus.ONLINE,
    )


@pytest.fixture
def store(local_connection: Connection) -> SessionStore:
    """In-memory store with the preset library and one local connection."""
    store = SessionStore(state=initial_state())
    store.add_connection(local_connection)
    return store
