"""Controller side of a conversation: turns view messages into relay calls."""

from __future__ import annotations

import logging
from typing import Callable

from codebuddy import messages
from codebuddy import terminal_ui as ui
from codebuddy.editor import EditorContext
from codebuddy.errors import CodeBuddyError, RequestFailure
from codebuddy.llm_clients import relay


logger = logging.getLogger(__name__)

IDLE = "idle"
AWAITING_RESPONSE = "awaiting_response"


def _default_notify(level: str, text: str) -> None:
    if level == "error":
        ui.print_error(text)
    else:
        ui.print_success(text)


class ConversationPanel:
    """One live conversation bound to an editor context.

    The view and the panel share nothing but messages: the view calls
    handle_message() with inbound messages, and the panel hands outbound
    messages to whatever callable was bound with bind_view().
    """

    def __init__(
        self,
        editor: EditorContext,
        client_factory: Callable,
        notify: Callable[[str, str], None] | None = None,
    ):
        self.editor = editor
        self.client_factory = client_factory
        self.notify = notify or _default_notify
        self.state = IDLE
        self.disposed = False
        self._post: Callable[[dict], None] | None = None
        self._outbox: list[dict] = []

    def bind_view(self, receive: Callable[[dict], None]) -> None:
        """Connect the rendering surface and flush anything queued before it existed."""
        self._post = receive
        pending, self._outbox = self._outbox, []
        for message in pending:
            receive(message)

    def post_message(self, message: dict) -> None:
        messages.validate_message(message, inbound=False)
        if self._post is None:
            self._outbox.append(message)
        else:
            self._post(message)

    def rebind(self, editor: EditorContext) -> None:
        """Point the conversation at a different editor context."""
        self.editor = editor

    def handle_message(self, message: dict) -> None:
        """Dispatch one inbound message from the view."""
        try:
            messages.validate_message(message, inbound=True)
        except ValueError as exc:
            logger.warning("Dropping malformed message: %s", exc)
            self.notify("error", str(exc))
            return

        command = message["command"]
        if command == messages.SUBMIT_PROMPT:
            self._submit_prompt(message["prompt"])
        elif command == messages.APPLY_CODE:
            self._apply_code(message["code"])

    def handle_prompt_from_library(self, prompt_text: str) -> None:
        """Ask the view to pre-fill and submit a saved prompt."""
        self.post_message(messages.execute_prompt(prompt_text))

    def _submit_prompt(self, prompt: str) -> None:
        if self.state == AWAITING_RESPONSE:
            self.notify("error", "Gemini is still working on the previous request.")
            return

        try:
            code_context = self.editor.capture()
        except OSError as exc:
            logger.error("Failed to read %s: %s", self.editor.path, exc)
            self.notify("error", f"Could not read {self.editor.path}: {exc}")
            return
        if not code_context:
            self.notify("error", "No code found in the editor to provide context.")
            return

        self.post_message(messages.show_loading())
        self.state = AWAITING_RESPONSE
        try:
            client = self.client_factory()
            response = relay(prompt, code_context, client)
        except RequestFailure as exc:
            logger.error("Gemini request failed: %s", exc.detail)
            self.notify("error", f"Error communicating with Gemini: {exc}")
            self.post_message(messages.add_response(messages.FALLBACK_RESPONSE))
        except (CodeBuddyError, OSError) as exc:
            logger.error("Relay aborted: %s", exc)
            self.notify("error", str(exc))
            self.post_message(messages.add_response(messages.FALLBACK_RESPONSE))
        else:
            self.post_message(messages.add_response(response))
        finally:
            self.state = IDLE

    def _apply_code(self, code: str) -> None:
        try:
            self.editor.apply_code(code)
        except OSError as exc:
            logger.error("Failed to write %s: %s", self.editor.path, exc)
            self.notify("error", f"Could not apply code to {self.editor.path}: {exc}")
            return
        self.notify("info", f"Gemini applied the code changes to {self.editor.label}!")

    def dispose(self) -> None:
        self.disposed = True
        self._post = None
        self._outbox.clear()


class PanelRegistry:
    """Holds the single live conversation for the process."""

    def __init__(self):
        self.current: ConversationPanel | None = None

    def create_or_show(
        self,
        editor: EditorContext,
        client_factory: Callable,
        notify: Callable[[str, str], None] | None = None,
    ) -> ConversationPanel:
        """Reuse the live panel (rebound to editor) or create the first one."""
        if self.current is not None and not self.current.disposed:
            self.current.rebind(editor)
            return self.current

        self.current = ConversationPanel(editor, client_factory, notify=notify)
        return self.current

    def dispose(self) -> None:
        if self.current is not None:
            self.current.dispose()
        self.current = None
