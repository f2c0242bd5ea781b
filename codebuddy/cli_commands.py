"""Command handlers behind the codebuddy CLI and the TUI slash commands.

Every handler takes an argparse-style namespace. With quiet=True it returns
a {"status", "message", "data"} dict instead of printing.
"""

import logging
from pathlib import Path
import sys

from . import terminal_ui as ui
from .config_manager import ConfigManager
from .editor import EditorContext, parse_selection
from .errors import ConfigurationError, PreconditionError, RequestFailure, ValidationError
from .storage import GlobalState
from .template_store import TemplateStore


logger = logging.getLogger(__name__)


def _result(status: str, message: str, **data) -> dict:
    return {"status": status, "message": message, "data": data}


def _config_manager(args) -> ConfigManager:
    return ConfigManager(getattr(args, "config_dir", None))


def open_store(config_manager: ConfigManager) -> TemplateStore:
    """Template store backed by the global state file."""
    return TemplateStore(GlobalState(config_manager.state_path))


def _fail(message: str, quiet: bool) -> dict:
    if not quiet:
        ui.print_error(message)
        sys.exit(1)
    return _result("error", message)


def _ask(input_fn, question: str, current: str = "") -> str | None:
    """Read one value from the user. Empty input keeps current; EOF cancels."""
    suffix = f" [{current}]" if current else ""
    try:
        answer = input_fn(f"{question}{suffix}: ")
    except (EOFError, KeyboardInterrupt):
        return None
    answer = answer.strip()
    return answer or current


def cmd_configure(args, *, input_fn=None, quiet=None):
    """Save the Gemini API key to the global config."""
    quiet = quiet if quiet is not None else getattr(args, "quiet", False)
    cm = _config_manager(args)
    api_key = getattr(args, "api_key", None)
    if not api_key:
        if input_fn is None:
            import getpass

            input_fn = getpass.getpass
        api_key = _ask(input_fn, "Enter your Gemini API key")
    if not api_key:
        return _fail("No API key entered.", quiet)

    cm.save_api_key(api_key)
    message = f"API key saved to {cm.config_path} ({api_key[:6]}...)."
    if not quiet:
        ui.print_success(message)
        ui.print_onboarding()
    return _result("success", message, config_path=str(cm.config_path))


def cmd_list(args, *, store=None, quiet=None):
    """List saved prompt templates."""
    quiet = quiet if quiet is not None else getattr(args, "quiet", False)
    templates = (store or open_store(_config_manager(args))).list()
    if not quiet:
        ui.print_template_list(templates)
    return _result(
        "success",
        f"{len(templates)} saved prompt(s)",
        templates=[t.to_dict() for t in templates],
    )


def cmd_add(args, *, input_fn=None, store=None, quiet=None):
    """Add a prompt template, asking for whatever was not passed in."""
    quiet = quiet if quiet is not None else getattr(args, "quiet", False)
    input_fn = input_fn or input
    label = getattr(args, "label", None) or _ask(input_fn, "Enter a short label for the prompt")
    if not label:
        return _result("info", "Add cancelled.")
    prompt = getattr(args, "prompt", None) or _ask(input_fn, "Enter the full prompt text")
    if not prompt:
        return _result("info", "Add cancelled.")

    template = (store or open_store(_config_manager(args))).add(label, prompt)
    message = f"Saved prompt '{template.label}' ({template.id})"
    if not quiet:
        ui.print_success(message)
    return _result("success", message, template=template.to_dict())


def cmd_edit(args, *, input_fn=None, store=None, quiet=None):
    """Edit a template's label and prompt text by id."""
    quiet = quiet if quiet is not None else getattr(args, "quiet", False)
    input_fn = input_fn or input
    store = store or open_store(_config_manager(args))
    template = store.get(args.id)
    if template is None:
        return _fail(f"Template not found: {args.id}", quiet)

    label = getattr(args, "label", None) or _ask(input_fn, "Edit the label", template.label)
    if label is None:
        return _result("info", "Edit cancelled.")
    prompt = getattr(args, "prompt", None) or _ask(input_fn, "Edit the prompt text", template.prompt)
    if prompt is None:
        return _result("info", "Edit cancelled.")

    if not store.edit(args.id, label, prompt):
        return _fail(f"Template not found: {args.id}", quiet)
    message = f"Updated prompt '{label}' ({args.id})"
    if not quiet:
        ui.print_success(message)
    return _result("success", message, template={"id": args.id, "label": label, "prompt": prompt})


def cmd_delete(args, *, store=None, quiet=None):
    """Delete a template by id."""
    quiet = quiet if quiet is not None else getattr(args, "quiet", False)
    if not (store or open_store(_config_manager(args))).delete(args.id):
        return _fail(f"Template not found: {args.id}", quiet)
    message = f"Deleted prompt {args.id}"
    if not quiet:
        ui.print_success(message)
    return _result("success", message, id=args.id)


def cmd_export(args, *, store=None, quiet=None):
    """Write every template to a JSON file."""
    quiet = quiet if quiet is not None else getattr(args, "quiet", False)
    cm = _config_manager(args)
    target = getattr(args, "path", None) or cm.load_config().export_filename
    try:
        written = (store or open_store(cm)).export_to(target)
    except ValidationError as exc:
        return _fail(str(exc), quiet)

    message = f"Prompts successfully exported to {written}"
    if not quiet:
        ui.print_success(message)
    return _result("success", message, path=str(written))


def cmd_import(args, *, store=None, quiet=None):
    """Replace the library with the templates in a JSON file."""
    quiet = quiet if quiet is not None else getattr(args, "quiet", False)
    source = Path(args.path)
    if not source.is_file():
        return _fail(f"File not found: {source}", quiet)
    try:
        templates = (store or open_store(_config_manager(args))).import_from(source)
    except ValidationError as exc:
        return _fail(f"Failed to import prompts: {exc}", quiet)

    message = f"Imported {len(templates)} prompt(s) from {source}"
    if not quiet:
        ui.print_success(message)
    return _result("success", message, count=len(templates))


def _one_shot(args, request: str, quiet: bool) -> dict:
    """Relay a single request against a file and print the answer."""
    from .llm_clients import TokenUsage, create_client, relay

    editor = EditorContext(args.file, parse_selection(getattr(args, "lines", None)))
    try:
        code_context = editor.capture()
        if not code_context:
            raise PreconditionError("No code found in the editor to provide context.")
        client = create_client(TokenUsage(), _config_manager(args))
        answer = relay(request, code_context, client)
    except RequestFailure as exc:
        logger.error("Gemini request failed: %s", exc.detail)
        if quiet:
            return _result("error", str(exc))
        raise
    except (ConfigurationError, PreconditionError) as exc:
        if quiet:
            return _result("error", str(exc))
        raise

    if not quiet:
        ui.print_markdown(answer)
    return _result("success", "Response received", response=answer)


def cmd_ask(args, *, quiet=None):
    """Ask Gemini one question about a file (or a line range of it)."""
    quiet = quiet if quiet is not None else getattr(args, "quiet", False)
    return _one_shot(args, args.request, quiet)


def cmd_run(args, *, quiet=None):
    """Run a saved prompt template against a file."""
    quiet = quiet if quiet is not None else getattr(args, "quiet", False)
    template = open_store(_config_manager(args)).get(args.id)
    if template is None:
        return _fail(f"Template not found: {args.id}", quiet)
    return _one_shot(args, template.prompt, quiet)


def cmd_start(args):
    """Start an interactive conversation bound to a file."""
    from .tui.shell import BuddyShell

    selection = parse_selection(getattr(args, "lines", None))
    editor = EditorContext(args.file, selection) if getattr(args, "file", None) else None
    shell = BuddyShell(editor=editor, config_dir=getattr(args, "config_dir", None))
    shell.run(initial_prompt=getattr(args, "prompt", None))
