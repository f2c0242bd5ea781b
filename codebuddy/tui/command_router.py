"""Slash command routing for the TUI shell."""

import argparse
import shlex

from codebuddy import cli_commands
from codebuddy.editor import EditorContext, parse_selection


def _error(message: str) -> dict:
    return {"status": "error", "message": message, "data": {}}


class CommandRouter:
    """Parses slash commands and dispatches to cmd_* handlers or the live conversation."""

    def __init__(self, shell):
        self.shell = shell
        self._commands = self._build_command_registry()

    def route(self, raw_input: str) -> dict:
        """Parse and execute a slash command. Returns result dict."""
        text = raw_input.lstrip("/").strip()
        if not text:
            return _error("Empty command. Type /help for available commands.")

        try:
            tokens = shlex.split(text)
        except ValueError as exc:
            return _error(f"Parse error: {exc}")

        cmd_name = tokens[0].lower()
        cmd_args = tokens[1:]

        if cmd_name not in self._commands:
            available = ", ".join(f"/{cmd}" for cmd in self._commands)
            return _error(f"Unknown command: /{cmd_name}. Available: {available}")

        try:
            return self._commands[cmd_name]["handler"](cmd_args)
        except Exception as exc:
            return _error(f"Command failed: {exc}")

    def _build_command_registry(self) -> dict:
        return {
            "open": {
                "handler": self._do_open,
                "help": "Bind the conversation to a file: /open PATH [START-END]",
            },
            "select": {
                "handler": self._do_select,
                "help": "Narrow the context to lines: /select START-END | all",
            },
            "prompts": {"handler": self._do_prompts, "help": "List saved prompts"},
            "add": {
                "handler": self._do_add,
                "help": "Save a prompt: /add [LABEL] [PROMPT]",
            },
            "edit": {"handler": self._do_edit, "help": "Edit a saved prompt: /edit ID"},
            "delete": {"handler": self._do_delete, "help": "Delete a saved prompt: /delete ID"},
            "run": {
                "handler": self._do_run,
                "help": "Run a saved prompt on the current code: /run ID",
            },
            "export": {
                "handler": self._do_export,
                "help": "Export saved prompts to JSON: /export [PATH]",
            },
            "import": {
                "handler": self._do_import,
                "help": "Replace saved prompts from JSON: /import PATH",
            },
            "apply": {
                "handler": self._do_apply,
                "help": "Write the last code block Gemini returned into the file",
            },
            "status": {"handler": self._do_status, "help": "Show session status"},
            "help": {"handler": self._do_help, "help": "Show available commands"},
            "quit": {"handler": self._do_quit, "help": "Exit codebuddy"},
            "exit": {"handler": self._do_exit, "help": "Exit codebuddy"},
        }

    def _args(self, **kwargs) -> argparse.Namespace:
        return argparse.Namespace(config_dir=self.shell.config_dir, **kwargs)

    def _do_help(self, tokens: list[str]) -> dict:
        """List available commands."""
        del tokens
        lines = []
        for name, entry in self._commands.items():
            lines.append(f"  /{name:<10} {entry['help']}")
        return {
            "status": "success",
            "message": "Available commands",
            "data": {
                "commands": list(self._commands.keys()),
                "help_text": "\n".join(lines),
            },
        }

    def _do_open(self, tokens: list[str]) -> dict:
        if not tokens:
            return _error("Usage: /open PATH [START-END]")
        selection = parse_selection(tokens[1]) if len(tokens) > 1 else None
        editor = EditorContext(tokens[0], selection)
        if not editor.path.is_file():
            return _error(f"File not found: {editor.path}")
        self.shell.open_editor(editor)
        return {"status": "success", "message": f"Now editing {editor.label}", "data": {}}

    def _do_select(self, tokens: list[str]) -> dict:
        editor = self.shell.editor
        if editor is None:
            return _error("Please open a code file first: /open PATH")
        editor.selection = parse_selection(" ".join(tokens)) if tokens else None
        self.shell.state.editor_label = editor.label
        return {"status": "success", "message": f"Context is now {editor.label}", "data": {}}

    def _do_prompts(self, tokens: list[str]) -> dict:
        del tokens
        return cli_commands.cmd_list(self._args(), store=self.shell.store, quiet=False)

    def _do_add(self, tokens: list[str]) -> dict:
        label = tokens[0] if tokens else None
        prompt = " ".join(tokens[1:]) or None
        args = self._args(label=label, prompt=prompt)
        return cli_commands.cmd_add(
            args, input_fn=self.shell.input_fn, store=self.shell.store, quiet=True
        )

    def _do_edit(self, tokens: list[str]) -> dict:
        if not tokens:
            return _error("Usage: /edit ID")
        args = self._args(id=tokens[0], label=None, prompt=None)
        return cli_commands.cmd_edit(
            args, input_fn=self.shell.input_fn, store=self.shell.store, quiet=True
        )

    def _do_delete(self, tokens: list[str]) -> dict:
        if not tokens:
            return _error("Usage: /delete ID")
        return cli_commands.cmd_delete(self._args(id=tokens[0]), store=self.shell.store, quiet=True)

    def _do_run(self, tokens: list[str]) -> dict:
        if not tokens:
            return _error("Usage: /run ID")
        template = self.shell.store.get(tokens[0])
        if template is None:
            return _error(f"Template not found: {tokens[0]}")
        if self.shell.panel is None:
            return _error("Please open a code file to run a prompt on: /open PATH")
        self.shell.panel.handle_prompt_from_library(template.prompt)
        return {"status": "info", "message": f"Ran prompt '{template.label}'", "data": {}}

    def _do_export(self, tokens: list[str]) -> dict:
        args = self._args(path=tokens[0] if tokens else None)
        return cli_commands.cmd_export(args, store=self.shell.store, quiet=True)

    def _do_import(self, tokens: list[str]) -> dict:
        if not tokens:
            return _error("Usage: /import PATH")
        return cli_commands.cmd_import(self._args(path=tokens[0]), store=self.shell.store, quiet=True)

    def _do_apply(self, tokens: list[str]) -> dict:
        del tokens
        if self.shell.view is None:
            return _error("Please open a code file first: /open PATH")
        code = self.shell.view.last_code_block()
        if code is None:
            return _error("The last response has no code block to apply.")
        self.shell.view.apply(code)
        return {"status": "info", "message": "Apply requested", "data": {}}

    def _do_status(self, tokens: list[str]) -> dict:
        del tokens
        state = self.shell.state
        lines = [
            f"  {state.welcome_summary}",
            f"  Prompts sent: {len(state.prompt_history)} | Session: {state.session_age}",
            f"  {self.shell.usage.summary()}",
        ]
        return {
            "status": "success",
            "message": "Session status",
            "data": {"detail": "\n".join(lines)},
        }

    def _do_quit(self, tokens: list[str]) -> dict:
        del tokens
        return {"status": "exit", "message": "Goodbye.", "data": {}}

    def _do_exit(self, tokens: list[str]) -> dict:
        del tokens
        return {"status": "exit", "message": "Goodbye.", "data": {}}
