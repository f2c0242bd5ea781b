"""Interactive TUI shell for codebuddy."""

import logging
import re

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from codebuddy import __version__
from codebuddy.cli_commands import open_store
from codebuddy.config_manager import ConfigManager
from codebuddy.editor import EditorContext
from codebuddy.llm_clients import TokenUsage, create_client
from codebuddy.tui.command_router import CommandRouter
from codebuddy.tui.completions import build_completer
from codebuddy.tui.conversation import PanelRegistry
from codebuddy.tui.onboarding import needs_onboarding, run_onboarding
from codebuddy.tui.renderer import ConversationView
from codebuddy.tui.session_state import SessionState

logger = logging.getLogger(__name__)
_console = Console()


class BuddyShell:
    """Persistent interactive session for codebuddy.

    Plain text becomes a submitPrompt message for the live conversation;
    slash commands go through the command router.
    """

    def __init__(self, editor: EditorContext | None = None, config_dir=None, input_fn=None):
        self.config_dir = config_dir
        self.config_manager = ConfigManager(config_dir)
        self.input_fn = input_fn or input
        self.usage = TokenUsage()
        self.store = open_store(self.config_manager)
        self.registry = PanelRegistry()
        self.panel = None
        self.view = None
        self.state = SessionState(template_count=len(self.store.list()))
        self.store.subscribe(self._on_templates_changed)
        self.completer = build_completer()
        self.session = PromptSession(history=InMemoryHistory(), completer=self.completer)
        self.router = CommandRouter(self)
        self.key_bindings = self._build_key_bindings()
        self._should_exit = False
        if editor is not None:
            self.open_editor(editor)

    @property
    def editor(self) -> EditorContext | None:
        return self.panel.editor if self.panel is not None else None

    def _make_client(self):
        return create_client(self.usage, self.config_manager)

    def open_editor(self, editor: EditorContext) -> None:
        """Create the conversation or rebind the existing one to editor."""
        panel = self.registry.create_or_show(editor, self._make_client)
        if panel is not self.panel:
            self.panel = panel
            self.view = ConversationView(post_message=panel.handle_message, console=_console)
            panel.bind_view(self.view.receive)
        self.state.editor_label = editor.label
        logger.debug("Conversation bound to %r", editor)

    def _on_templates_changed(self) -> None:
        self.state.template_count = len(self.store.list())

    def run(self, initial_prompt: str | None = None):
        """Main loop. Blocks until exit."""
        if needs_onboarding(self.config_manager)["needs_api_key"]:
            run_onboarding(self.config_manager, input_fn=self.input_fn)

        self._print_welcome()
        if initial_prompt:
            self._handle_natural_language(initial_prompt)
        while True:
            try:
                user_input = self.session.prompt(
                    "codebuddy> ",
                    bottom_toolbar=self._get_toolbar,
                    key_bindings=self.key_bindings,
                ).strip()
                if not user_input:
                    continue
                if user_input.lower() in ("exit", "quit"):
                    break
                self._handle_input(user_input)
                if self._should_exit:
                    break
            except (EOFError, KeyboardInterrupt):
                break
        self.registry.dispose()
        self._print_goodbye()

    def _handle_input(self, text: str):
        """Route input to slash command handler or the conversation."""
        if text.startswith("/"):
            self._handle_slash_command(text)
        else:
            self._handle_natural_language(text)

    def _handle_slash_command(self, text: str):
        """Route slash command through CommandRouter and display result."""
        result = self.router.route(text)
        if result.get("status") == "exit":
            self._should_exit = True
            return
        self._display_result(result)

    def _handle_natural_language(self, text: str):
        """Send free text to Gemini along with the current code context."""
        if self.view is None:
            self._display_result(
                {
                    "status": "error",
                    "message": "Please open a code file before asking: /open PATH",
                    "data": {},
                }
            )
            return
        self.state.record_prompt(text, self.state.editor_label)
        self.view.submit(text)

    def _display_result(self, result: dict):
        """Display a command result dict with Rich styling."""
        status = result.get("status", "info")
        message = result.get("message", "")
        data = result.get("data", {})

        try:
            if status == "error":
                _console.print(
                    Panel(
                        f"[bold red]Error:[/bold red] {escape(message)}",
                        border_style="red",
                        expand=False,
                    )
                )
            elif status == "success":
                _console.print(
                    Panel(
                        f"[bold green]OK:[/bold green] {escape(message)}",
                        border_style="green",
                        expand=False,
                    )
                )
            else:
                _console.print(f"[cyan]{escape(message)}[/cyan]")

            if "help_text" in data:
                help_text = re.sub(r"(/\w+)", r"[bold cyan]\1[/bold cyan]", data["help_text"])
                _console.print(help_text)
            if "detail" in data:
                _console.print(escape(data["detail"]), highlight=False)
        except Exception:
            if status == "error":
                print(f"Error: {message}")
            elif status == "success":
                print(f"OK: {message}")
            else:
                print(message)

            if "help_text" in data:
                print(data["help_text"])
            if "detail" in data:
                print(data["detail"])

    def _get_toolbar(self) -> str:
        """Build status toolbar text."""
        prompt_count = len(self.state.prompt_history)
        prompt_text = "1 prompt sent" if prompt_count == 1 else f"{prompt_count} prompts sent"
        editor = self.state.editor_label or "no file"
        return (
            f"codebuddy | {editor} | {prompt_text} | "
            f"{self.state.template_count} saved prompts | Ctrl-L clear"
        )

    def _build_key_bindings(self):
        """Create key bindings for shell usability helpers."""
        kb = KeyBindings()

        @kb.add("c-l")
        def _clear_screen(event):
            event.app.renderer.clear()

        return kb

    def _print_welcome(self):
        """Print welcome banner with session info."""
        _console.print()
        _console.print(f"[bold bright_cyan]codebuddy v{__version__}[/bold bright_cyan]")
        _console.print(f"[dim]{self.state.welcome_summary}[/dim]")
        _console.print("[dim]Type /help for commands, /quit to exit, or just ask about your code.[/dim]")
        _console.print()

    def _print_goodbye(self):
        """Print exit message."""
        _console.print("\n[dim cyan]Goodbye.[/dim cyan]")
