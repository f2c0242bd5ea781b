"""Terminal output formatting built on rich."""

from __future__ import annotations

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

# force_terminal=False lets rich auto-detect TTY (important for tests).
_console = Console()


def _rich_tty() -> bool:
    """Return True when attached to a real terminal."""
    return _console.is_terminal


def print_msg(text: str = "", **kwargs) -> None:
    _console.print(text, highlight=False, **kwargs)


def print_error(text: str) -> None:
    """Print an error message."""
    _console.print(f"[bold red]Error:[/bold red] {escape(text)}", highlight=False)


def print_success(text: str) -> None:
    _console.print(f"[green]{escape(text)}[/green]", highlight=False)


def print_markdown(text: str) -> None:
    """Render a Gemini answer as Markdown."""
    _console.print(Markdown(text))


def print_template_list(templates: list) -> None:
    """Print the template library, one row per template."""
    if not templates:
        print_msg("No saved prompts. Add one with `codebuddy prompts add`.")
        return

    if _rich_tty():
        table = Table(title="Prompt Library", show_header=True, header_style="bold")
        table.add_column("ID")
        table.add_column("Label")
        table.add_column("Prompt")
        for template in templates:
            table.add_row(escape(template.id), escape(template.label), escape(template.prompt))
        _console.print(table)
    else:
        print("Saved prompts:\n")
        for template in templates:
            print(f"  {template.id}  {template.label}")
            print(f"    {template.prompt}")
        print()


def print_onboarding() -> None:
    """Print getting-started guidance after configure."""
    content = (
        "\n"
        "  Ask about a file:\n"
        '    $ codebuddy ask app.py "explain this"\n'
        "\n"
        "  Start a conversation bound to a selection:\n"
        "    $ codebuddy start app.py --lines 10-40\n"
        "\n"
        "  Save a reusable prompt:\n"
        "    $ codebuddy prompts add\n"
    )

    if _rich_tty():
        _console.print()
        _console.print(Panel(content, expand=False))
    else:
        print()
        border = "+" + "-" * 58 + "+"
        print(border)
        for line in content.strip("\n").splitlines():
            print(f"| {line:<56} |")
        print(border)
