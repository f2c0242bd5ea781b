"""The code a conversation is bound to: a file and an optional line selection."""

from __future__ import annotations

import re
from pathlib import Path


_RANGE_RE = re.compile(r"^\s*(\d+)\s*(?:[-:]\s*(\d+))?\s*$")


def parse_selection(value: str | None) -> tuple[int, int] | None:
    """Parse "10-20", "10:20" or "7" into an inclusive 1-based line range.

    "", "all" and None mean no selection (the whole document).
    """
    if value is None:
        return None
    text = value.strip()
    if not text or text.lower() == "all":
        return None

    match = _RANGE_RE.match(text)
    if not match:
        raise ValueError(f"Invalid line range: {value!r} (expected START-END)")
    start = int(match.group(1))
    end = int(match.group(2) or start)
    if start < 1 or end < start:
        raise ValueError(f"Invalid line range: {value!r}")
    return start, end


class EditorContext:
    """A text document plus the lines the user has selected in it."""

    def __init__(self, path: str | Path, selection: tuple[int, int] | None = None):
        self.path = Path(path).resolve()
        self.selection = selection

    def __repr__(self) -> str:
        return f"EditorContext({str(self.path)!r}, selection={self.selection!r})"

    @property
    def has_selection(self) -> bool:
        return self.selection is not None

    @property
    def label(self) -> str:
        if self.selection is None:
            return self.path.name
        start, end = self.selection
        return f"{self.path.name}:{start}-{end}"

    def text(self) -> str:
        """Whole document. A missing file reads as empty."""
        if not self.path.is_file():
            return ""
        return self.path.read_text(encoding="utf-8", errors="replace")

    def _span(self, lines: list[str]) -> tuple[int, int]:
        """Selection as a clamped 0-based [start, stop) slice."""
        start, end = self.selection
        start_idx = min(start - 1, len(lines))
        stop_idx = min(end, len(lines))
        return start_idx, stop_idx

    def capture(self) -> str:
        """The selected lines if there is a selection, else the whole document."""
        content = self.text()
        if self.selection is None:
            return content
        lines = content.splitlines(keepends=True)
        start_idx, stop_idx = self._span(lines)
        return "".join(lines[start_idx:stop_idx])

    def apply_code(self, code: str) -> None:
        """Replace the selection (or the whole document) with code and save.

        Afterwards the selection covers the inserted lines.
        """
        if self.selection is None:
            self.path.write_text(code, encoding="utf-8")
            return

        lines = self.text().splitlines(keepends=True)
        start_idx, stop_idx = self._span(lines)
        replaced = lines[start_idx:stop_idx]
        new_lines = code.splitlines(keepends=True)
        # Keep the line break that separated the selection from what follows.
        if new_lines and stop_idx < len(lines) and replaced and replaced[-1].endswith("\n"):
            if not new_lines[-1].endswith("\n"):
                new_lines[-1] += "\n"

        updated = lines[:start_idx] + new_lines + lines[stop_idx:]
        self.path.write_text("".join(updated), encoding="utf-8")
        self.selection = (start_idx + 1, start_idx + max(len(new_lines), 1))
