"""Tests for configuration loading and validation."""

from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
import yaml

from aetheria.config.loader import ConfigError, load_config, save_config
from aetheria.config.schema import AetheriaConfig
from aetheria.errors import AetheriaError


def test_default_config():
    """Test that default config has expected values."""
    config = AetheriaConfig()

    assert config.server.host == "127.0.0.1"
    assert config.server.port == 8000

    assert config.client.server_url == "http://127.0.0.1:8000"
    assert config.client.stream_timeout is None

    assert config.prober.probe_timeout == 5.0
    assert config.prober.models_timeout == 8.0

    assert config.cloud.model == "gemini-2.5-flash"
    assert config.voice.voice == "Algenib"
    assert config.defaults.persona_id == "scholar"
    assert config.logging.level == "INFO"


def test_cloud_api_key_from_environment(monkeypatch):
    """Test that the cloud API key defaults to GEMINI_API_KEY."""
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    assert AetheriaConfig().cloud.api_key == "env-key"

    monkeypatch.delenv("GEMINI_API_KEY")
    assert AetheriaConfig().cloud.api_key is None


def test_load_config_nonexistent_returns_defaults():
    """Test that loading a nonexistent config returns defaults."""
    with TemporaryDirectory() as tmpdir:
        config = load_config(Path(tmpdir) / "nonexistent.yaml")

        assert config.server.port == 8000


def test_load_config_empty_file_returns_defaults():
    """Test that an empty config file returns defaults."""
    with TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "empty.yaml"
        config_path.write_text("")

        config = load_config(config_path)
        assert config.defaults.temperature == 0.7


def test_load_config_partial_override():
    """Test that partial config overrides only specified values."""
    with TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "partial.yaml"

        with open(config_path, "w") as f:
            yaml.safe_dump({"server": {"port": 9000}, "defaults": {"temperature": 0.2}}, f)

        config = load_config(config_path)

        assert config.server.port == 9000
        assert config.defaults.temperature == 0.2
        assert config.server.host == "127.0.0.1"
        assert config.defaults.max_tokens == 1024


def test_load_config_invalid_yaml():
    """Test that invalid YAML raises ConfigError."""
    with TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "invalid.yaml"
        config_path.write_text("server: [unclosed")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(config_path)


def test_load_config_validation_error():
    """Test that out-of-range values raise ConfigError."""
    with TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "bad.yaml"
        config_path.write_text("server:\n  port: 70000\n")

        with pytest.raises(ConfigError, match="validation failed"):
            load_config(config_path)


def test_load_config_rejects_non_mapping(tmp_path):
    config_path = tmp_path / "list.yaml"
    config_path.write_text("- server\n- client\n")

    with pytest.raises(ConfigError, match="must be a mapping"):
        load_config(config_path)


def test_config_error_is_aetheria_error():
    assert issubclass(ConfigError, AetheriaError)


def test_save_and_reload_config(tmp_path):
    """Test that a saved config loads back unchanged."""
    config = AetheriaConfig()
    config.server.port = 8123
    config.client.stream_timeout = 90.0
    config.cloud.api_key = None

    path = save_config(config, tmp_path / "nested" / "aetheria.yaml")

    assert path.exists()
    loaded = load_config(path)
    assert loaded.server.port == 8123
    assert loaded.client.stream_timeout == 90.0


def test_save_config_omits_api_key(tmp_path):
    """Test that the cloud API key is never written to disk."""
    config = AetheriaConfig()
    config.cloud.api_key = "secret-key"

    path = save_config(config, tmp_path / "aetheria.yaml")

    assert "secret-key" not in path.read_text()
    data = yaml.safe_load(path.read_text())
    assert "api_key" not in data["cloud"]
