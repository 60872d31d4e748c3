"""Local JSON file key-value store."""

import json
from dataclasses import dataclass
from pathlib import Path

from nutrition_ledger.services.ledger import StateStore


@dataclass
class JsonFileStateStore(StateStore):
    """Keeps every key in a single JSON object on disk."""

    path: Path

    def get(self, key: str) -> str | None:
        """Return the stored value for a key."""
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        """Store a value and rewrite the file."""
        entries = self._read()
        entries[key] = value
        self._write(entries)

    def remove(self, key: str) -> None:
        """Delete a key and rewrite the file if it was present."""
        entries = self._read()
        if entries.pop(key, None) is not None:
            self._write(entries)

    def _read(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        return data if isinstance(data, dict) else {}

    def _write(self, entries: dict[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(entries, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)
