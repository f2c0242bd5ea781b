"""Persisted library of reusable prompt templates."""

from __future__ import annotations

from dataclasses import asdict, dataclass
import json
import logging
from pathlib import Path
import time
from typing import Callable

from .errors import InvalidFormatError, NothingToExportError
from .storage import GlobalState


logger = logging.getLogger(__name__)

STORAGE_KEY = "gemini-prompts"
TEMPLATE_FIELDS = ("id", "label", "prompt")


@dataclass
class Template:
    """A saved prompt: a short label plus the text sent to Gemini."""

    id: str
    label: str
    prompt: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Template":
        return cls(id=data["id"], label=data["label"], prompt=data["prompt"])


def _is_valid_entry(entry) -> bool:
    if not isinstance(entry, dict):
        return False
    for field_name in TEMPLATE_FIELDS:
        value = entry.get(field_name)
        if not isinstance(value, str) or not value:
            return False
    return True


class TemplateStore:
    """CRUD over the template list kept in global state.

    Each operation reads the whole list, changes it, and writes it back.
    Subscribers are called once after every successful write.
    """

    def __init__(self, state: GlobalState, key: str = STORAGE_KEY):
        self.state = state
        self.key = key
        self._listeners: list[Callable[[], None]] = []

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a data-changed listener. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def _load(self) -> list[dict]:
        data = self.state.get(self.key, [])
        return data if isinstance(data, list) else []

    def _save(self, entries: list[dict]) -> None:
        self.state.update(self.key, entries)
        self._notify()

    def _new_id(self, existing: set[str]) -> str:
        stamp = time.time_ns()
        while str(stamp) in existing:
            stamp += 1
        return str(stamp)

    def list(self) -> list[Template]:
        """All templates in insertion order."""
        return [Template.from_dict(entry) for entry in self._load() if _is_valid_entry(entry)]

    def get(self, template_id: str) -> Template | None:
        for template in self.list():
            if template.id == template_id:
                return template
        return None

    def add(self, label: str | None, prompt: str | None) -> Template | None:
        """Append a new template. Returns None if label or prompt is empty."""
        if not label or not prompt:
            return None

        entries = self._load()
        template = Template(
            id=self._new_id({entry.get("id") for entry in entries if isinstance(entry, dict)}),
            label=label,
            prompt=prompt,
        )
        entries.append(template.to_dict())
        self._save(entries)
        logger.debug("Added template %s (%s)", template.id, label)
        return template

    def edit(self, template_id: str, label: str | None, prompt: str | None) -> bool:
        """Replace label and prompt in place.

        Returns False for an unknown id or an empty label or prompt; nothing
        is saved in that case.
        """
        if not label or not prompt:
            logger.debug("Edit ignored, empty label or prompt for %s", template_id)
            return False

        entries = self._load()
        for index, entry in enumerate(entries):
            if isinstance(entry, dict) and entry.get("id") == template_id:
                entries[index] = {**entry, "label": label, "prompt": prompt}
                self._save(entries)
                return True
        logger.debug("Edit ignored, no template with id %s", template_id)
        return False

    def delete(self, template_id: str) -> bool:
        """Remove the template with this id. Returns whether one was removed."""
        entries = self._load()
        remaining = [
            entry for entry in entries
            if not (isinstance(entry, dict) and entry.get("id") == template_id)
        ]
        self._save(remaining)
        return len(remaining) != len(entries)

    def export_all(self) -> bytes:
        """Serialize the whole library as indented UTF-8 JSON."""
        templates = self.list()
        if not templates:
            raise NothingToExportError("There are no prompts to export.")
        payload = [template.to_dict() for template in templates]
        return json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")

    def export_to(self, path: str | Path) -> Path:
        target = Path(path)
        data = self.export_all()
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return target

    def import_all(self, data: bytes | str) -> list[Template]:
        """Replace the whole library with the templates in data.

        Anything other than a JSON array of complete templates is rejected
        and the current library is left as it was.
        """
        if isinstance(data, bytes):
            try:
                data = data.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise InvalidFormatError("Import file is not valid UTF-8.") from exc

        try:
            parsed = json.loads(data)
        except json.JSONDecodeError as exc:
            raise InvalidFormatError(f"Invalid JSON in import file: {exc}") from exc

        if not isinstance(parsed, list) or not all(_is_valid_entry(entry) for entry in parsed):
            raise InvalidFormatError(
                "Invalid file format. Expected an array of prompts with id, label and prompt."
            )

        entries = [
            {field_name: entry[field_name] for field_name in TEMPLATE_FIELDS}
            for entry in parsed
        ]
        self._save(entries)
        return [Template.from_dict(entry) for entry in entries]

    def import_from(self, path: str | Path) -> list[Template]:
        return self.import_all(Path(path).read_bytes())
