"""Rendering surface for a conversation: a pure function of the messages it receives."""

from __future__ import annotations

import re
from typing import Callable

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape

from codebuddy import messages


_FENCE_RE = re.compile(r"^```[\w+-]*[ \t]*\n(.*?)^```[ \t]*$", re.MULTILINE | re.DOTALL)

GREETING = "Hello! Open a code file and ask me a question about it."


def extract_code_blocks(text: str) -> list[str]:
    """Return the bodies of all fenced code blocks in a Markdown answer."""
    return [match.group(1).rstrip("\n") + "\n" for match in _FENCE_RE.finditer(text)]


class ConversationView:
    """Append-only chat history rendered with rich.

    Outbound messages from the controller arrive through receive(); user
    input leaves through the post_message callable as submitPrompt/applyCode.
    """

    def __init__(self, post_message: Callable[[dict], None], console: Console | None = None):
        self.post_message = post_message
        self.console = console or Console()
        self.history: list[dict] = []
        self._append("gemini", GREETING)

    def _append(self, role: str, text: str) -> None:
        self.history.append({"role": role, "text": text})
        if role == "user":
            self.console.print(f"[bold]You:[/bold] {escape(text)}", highlight=False)
        elif role == "loading":
            self.console.print("[bold blue]Gemini:[/bold blue] [dim]Thinking...[/dim]")
        else:
            self.console.print("[bold blue]Gemini:[/bold blue]")
            self.console.print(Markdown(text))

    def submit(self, prompt: str) -> None:
        """Echo the user's line and send it to the controller."""
        if not prompt or not prompt.strip():
            return
        self._append("user", prompt)
        self.post_message(messages.submit_prompt(prompt))

    def apply(self, code: str) -> None:
        self.post_message(messages.apply_code(code))

    def receive(self, message: dict) -> None:
        """Render one outbound message from the controller."""
        messages.validate_message(message, inbound=False)
        command = message["command"]
        if command == messages.SHOW_LOADING:
            self._append("loading", "Thinking...")
        elif command == messages.ADD_RESPONSE:
            self._append("gemini", message["response"])
        elif command == messages.EXECUTE_PROMPT:
            self.submit(message["prompt"])

    @property
    def responses(self) -> list[str]:
        return [entry["text"] for entry in self.history[1:] if entry["role"] == "gemini"]

    def last_code_block(self) -> str | None:
        """Last fenced code block of the most recent answer, if it has one."""
        if not self.responses:
            return None
        blocks = extract_code_blocks(self.responses[-1])
        return blocks[-1] if blocks else None
