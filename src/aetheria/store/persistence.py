"""JSON file persistence for the session store."""

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from aetheria.store.models import AppState

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_NAME = "aetheria-storage"
STORAGE_VERSION = 0

# Fields written to disk; built-in presets are rebuilt from the library on load
PERSISTED_FIELDS = {
    "workspaces",
    "active_workspace_id",
    "connections",
    "active_connection_id",
    "sessions",
    "active_session_id",
    "personas",
    "frameworks",
    "linguistic_controls",
    "role",
    "is_configured",
}
_PRESET_FIELDS = ("personas", "frameworks", "linguistic_controls")


class LocalStorage:
    """Single named record in a JSON file on disk."""

    def __init__(self, path: str | Path, name: str = DEFAULT_STORAGE_NAME):
        """Initialize storage.

        Args:
            path: JSON file holding the record (created on first save)
            name: Key the record is stored under
        """
        self.path = Path(path).expanduser()
        self.name = name

    def serialize(self, state: AppState) -> dict[str, Any]:
        """Build the JSON-ready record for a state snapshot."""
        data = state.model_dump(mode="json", include=PERSISTED_FIELDS)
        for field in _PRESET_FIELDS:
            data[field] = [p for p in data[field] if p.get("is_custom")]
        return {"state": data, "version": STORAGE_VERSION}

    def save(self, state: AppState) -> None:
        """Write the state atomically, keeping any other records in the file."""
        records = self._read_file() or {}
        records[self.name] = self.serialize(state)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(records, f, indent=2)
        os.replace(tmp_path, self.path)

    def load(self) -> dict[str, Any] | None:
        """Read the persisted state fields.

        Returns:
            State fields (custom presets only), or None if the record is
            missing or unreadable
        """
        records = self._read_file()
        if not records:
            return None
        record = records.get(self.name)
        if not isinstance(record, dict) or not isinstance(record.get("state"), dict):
            return None
        return record["state"]

    def load_state(self, base: AppState) -> AppState | None:
        """Restore a snapshot on top of ``base``.

        Built-in presets come from ``base``; persisted custom presets are
        appended after them.

        Returns:
            Restored state, or None if nothing valid is stored
        """
        data = self.load()
        if data is None:
            return None

        fields = {k: v for k, v in data.items() if k in PERSISTED_FIELDS}
        for field in _PRESET_FIELDS:
            stored = fields.get(field, [])
            if not isinstance(stored, list) or not all(isinstance(p, dict) for p in stored):
                logger.warning(f"Ignoring stored state in {self.path}: malformed {field}")
                return None
            builtin = [p.model_dump() for p in getattr(base, field) if not p.is_custom]
            builtin_ids = {p["id"] for p in builtin}
            custom = [p for p in stored if p.get("id") not in builtin_ids]
            fields[field] = builtin + custom

        try:
            return AppState.model_validate({**base.model_dump(), **fields})
        except ValidationError as e:
            logger.warning(f"Ignoring invalid stored state in {self.path}: {e}")
            return None

    def clear(self) -> None:
        """Remove the record, leaving other records untouched."""
        records = self._read_file()
        if not records or self.name not in records:
            return
        del records[self.name]
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(records, f, indent=2)
        os.replace(tmp_path, self.path)

    def _read_file(self) -> dict[str, Any] | None:
        if not self.path.exists():
            return None
        try:
            with open(self.path, encoding="utf-8") as f:
                records = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read {self.path}: {e}")
            return None
        return records if isinstance(records, dict) else None
