"""JSON file implementation of client-local storage."""

import json
import os
from dataclasses import dataclass
from pathlib import Path

from liva.services.storage import LocalStorage


@dataclass
class JsonFileStorage(LocalStorage):
    """Keeps all keys in a single JSON object on disk."""

    path: Path

    @classmethod
    def create(cls, path: str | Path) -> "JsonFileStorage":
        """Create storage for a path, expanding the user directory."""
        return cls(path=Path(path).expanduser())

    def get_item(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        """Store a value and flush the file."""
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        """Remove a key and flush the file if it was present."""
        data = self._load()
        if key not in data:
            return
        del data[key]
        self._save(data)

    def _load(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        raw = self.path.read_text(encoding="utf-8")
        if not raw.strip():
            return {}
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"Local storage file {self.path} is not a JSON object")
        return data

    def _save(self, data: dict[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        tmp_path.write_text(json.dumps(data), encoding="utf-8")
        os.replace(tmp_path, self.path)
