"""JSON-backed global key-value storage."""

import copy
import json
from pathlib import Path

from .errors import ValidationError


class GlobalState:
    """Process-wide key-value store persisted as one JSON object on disk.

    Every update rewrites the whole file; the last writer wins.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read(self) -> dict:
        if not self.path.is_file():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as exc:
            raise ValidationError(f"Corrupt state file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ValidationError(f"Corrupt state file {self.path}: expected an object")
        return data

    def get(self, key: str, default=None):
        """Return a copy of the stored value, or default when the key is unset."""
        data = self._read()
        if key not in data:
            return copy.deepcopy(default)
        return copy.deepcopy(data[key])

    def update(self, key: str, value) -> None:
        """Store value under key and write the file."""
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")

    def keys(self) -> list[str]:
        return list(self._read().keys())
