"""Shared fixtures for CLI tests."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from aetheria.config.schema import AetheriaConfig


@pytest.fixture
def tmp_config_path(tmp_path: Path) -> Path:
    """Redirect the default config location into a temp directory."""
    path = tmp_path / "aetheria.yaml"
    with (
        patch("aetheria.config.loader.DEFAULT_CONFIG_PATH", path),
        patch("aetheria.cli.init_cmd.DEFAULT_CONFIG_PATH", path),
    ):
        yield path


@pytest.fixture
def cli_config(tmp_path: Path) -> AetheriaConfig:
    """Config whose session storage lives in a temp directory."""
    config = AetheriaConfig()
    config.client.storage_path = str(tmp_path / "storage.json")
    config.cloud.api_key = None
    return config


@pytest.fixture
def mock_engine_models():
    """Mock an engine listing a few models."""
    mock = AsyncMock(return_value=["qwen2.5:7b", "llava:13b", "nomic-embed-text"])
    with patch("aetheria.engine.prober.ConnectionProber.list_models", mock):
        yield mock


@pytest.fixture
def mock_engine_offline():
    """Mock an engine that lists nothing."""
    mock = AsyncMock(return_value=[])
    with patch("aetheria.engine.prober.ConnectionProber.list_models", mock):
        yield mock
