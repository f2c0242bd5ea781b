"""Autocomplete definitions for the codebuddy TUI shell."""

from prompt_toolkit.completion import WordCompleter


COMMAND_LIST = [
    "/open",
    "/select",
    "/select all",
    "/prompts",
    "/add",
    "/edit",
    "/delete",
    "/run",
    "/export",
    "/import",
    "/apply",
    "/status",
    "/help",
    "/quit",
    "/exit",
]


def build_completer() -> WordCompleter:
    """Create slash-command autocomplete completer."""
    return WordCompleter(COMMAND_LIST, sentence=True, ignore_case=True)
