"""Runtime session data for the interactive TUI."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class SessionState:
    """What the shell shows in its toolbar and /status output."""

    editor_label: str = ""
    template_count: int = 0
    session_start: datetime = field(default_factory=datetime.now)
    prompt_history: list[dict] = field(default_factory=list)

    def record_prompt(self, user_input: str, editor_label: str):
        """Store a submitted prompt in session history."""
        self.prompt_history.append(
            {
                "timestamp": datetime.now(),
                "user_input": user_input,
                "editor": editor_label,
            }
        )

    @property
    def session_age(self) -> str:
        delta_seconds = max((datetime.now() - self.session_start).total_seconds(), 0.0)
        if delta_seconds < 60:
            return "just started"
        minutes = int(delta_seconds // 60)
        if minutes < 60:
            return f"{minutes} min"
        hours = minutes // 60
        unit = "hour" if hours == 1 else "hours"
        return f"{hours} {unit}"

    @property
    def welcome_summary(self) -> str:
        """One-line summary for the shell welcome banner."""
        editor = self.editor_label or "no file open (use /open PATH)"
        return f"Editing: {editor} | Saved prompts: {self.template_count}"
