"""Read and write ``aetheria.yaml``."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from aetheria.config.schema import AetheriaConfig
from aetheria.errors import AetheriaError

DEFAULT_CONFIG_PATH = Path.home() / ".aetheria" / "aetheria.yaml"


class ConfigError(AetheriaError):
    """The config file exists but cannot be used."""


def _read_mapping(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid YAML in {path}: top level must be a mapping")
    return data


def load_config(path: Path | None = None) -> AetheriaConfig:
    """Load the client and gateway configuration.

    A missing or empty file yields the defaults, so the CLI and server work
    without running ``aetheria init`` first.

    Raises:
        ConfigError: If the file is unreadable, not YAML, or out of bounds
    """
    path = path or DEFAULT_CONFIG_PATH
    if not path.exists():
        return AetheriaConfig()

    try:
        return AetheriaConfig.model_validate(_read_mapping(path))
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed: {e}") from e


def save_config(config: AetheriaConfig, path: str | Path | None = None) -> Path:
    """Write config as YAML, creating the parent directory.

    The cloud API key is left out; it is read from ``GEMINI_API_KEY``.
    """
    target = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(exclude={"cloud": {"api_key"}})
    target.write_text(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))
    return target
