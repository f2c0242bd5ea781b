"""Interactive first-run onboarding for the codebuddy TUI."""

from rich.console import Console

from codebuddy.config_manager import ConfigManager


_console = Console()


def needs_onboarding(config_manager: ConfigManager) -> dict:
    """Check what onboarding steps are needed.

    Returns:
        {"needs_api_key": bool}  # No key in env, .env or config.yaml
    """
    return {"needs_api_key": config_manager.resolve_api_key() is None}


def run_onboarding(config_manager: ConfigManager, *, input_fn=None) -> dict:
    """Ask for a Gemini API key if none is configured.

    Args:
        config_manager: Where the key is saved
        input_fn: Optional callable for getting user input (default: built-in input()).
                  Used for testing. Signature: input_fn(prompt: str) -> str

    Returns:
        {"api_key_configured": bool, "skipped": bool}
    """
    if input_fn is None:
        input_fn = input

    check = needs_onboarding(config_manager)
    if not check["needs_api_key"]:
        return {"api_key_configured": True, "skipped": True}

    _console.print("[cyan]codebuddy sends your questions to Google Gemini.[/cyan]")
    _console.print("[dim]Get your key at: https://aistudio.google.com/apikey[/dim]")
    try:
        key = input_fn("Enter your Gemini API key (or press Enter to skip): ").strip()
    except (EOFError, KeyboardInterrupt):
        key = ""

    if not key:
        _console.print("[yellow]Skipped. Questions will fail until a key is set.[/yellow]")
        return {"api_key_configured": False, "skipped": False}

    config_manager.save_api_key(key)
    _console.print(
        f"[green]Gemini key saved to {config_manager.config_path} ({key[:6]}...).[/green]"
    )
    return {"api_key_configured": True, "skipped": False}
