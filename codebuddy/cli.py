"""
CLI for codebuddy.

Usage:
    codebuddy start app.py --lines 10-40
    codebuddy ask app.py "why does this loop never end?"
    codebuddy prompts add --label "Explain" --prompt "Explain this code"
    codebuddy prompts run 1718000000000 app.py
    codebuddy prompts export gemini-prompts.json
"""

import argparse
import logging
import os
import sys

from . import __version__
from . import cli_commands


DEBUG_ENV = "CODEBUDDY_DEBUG"


def _configure_logging(debug: bool) -> None:
    if debug or os.environ.get(DEBUG_ENV, "").strip() in ("1", "true", "yes"):
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="codebuddy - ask Gemini about the code you are working on"
    )
    parser.add_argument(
        "--version", action="version", version=f"codebuddy {__version__}"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--config-dir",
        default=None,
        help="Directory for config.yaml and saved prompts (default: ~/.codebuddy)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Arguments shared by every command that sends code to Gemini
    context = argparse.ArgumentParser(add_help=False)
    context.add_argument("file", help="File whose contents are sent as context")
    context.add_argument(
        "--lines",
        default=None,
        help="Only send this line range, e.g. 10-40 (default: whole file)",
    )

    # start command
    p_start = subparsers.add_parser("start", help="Start an interactive conversation")
    p_start.add_argument("file", nargs="?", default=None, help="File to bind the conversation to")
    p_start.add_argument("--lines", default=None, help="Line range to use as context")
    p_start.add_argument("--prompt", default=None, help="Submit this request right away")
    p_start.set_defaults(func=cli_commands.cmd_start)

    # ask command
    p_ask = subparsers.add_parser("ask", parents=[context], help="Ask one question about a file")
    p_ask.add_argument("request", help="What you want Gemini to do with the code")
    p_ask.set_defaults(func=cli_commands.cmd_ask)

    # configure command
    p_configure = subparsers.add_parser("configure", help="Save your Gemini API key")
    p_configure.add_argument("--api-key", default=None, help="Key to save (prompted if omitted)")
    p_configure.set_defaults(func=cli_commands.cmd_configure)

    # prompts command
    p_prompts = subparsers.add_parser("prompts", help="Manage the saved prompt library")
    prompts_sub = p_prompts.add_subparsers(dest="prompts_action")

    p_list = prompts_sub.add_parser("list", help="List saved prompts")
    p_list.set_defaults(func=cli_commands.cmd_list)

    p_add = prompts_sub.add_parser("add", help="Save a new prompt")
    p_add.add_argument("--label", default=None, help="Short label (prompted if omitted)")
    p_add.add_argument("--prompt", default=None, help="Prompt text (prompted if omitted)")
    p_add.set_defaults(func=cli_commands.cmd_add)

    p_edit = prompts_sub.add_parser("edit", help="Edit a saved prompt")
    p_edit.add_argument("id", help="Prompt id")
    p_edit.add_argument("--label", default=None, help="New label (prompted if omitted)")
    p_edit.add_argument("--prompt", default=None, help="New prompt text (prompted if omitted)")
    p_edit.set_defaults(func=cli_commands.cmd_edit)

    p_delete = prompts_sub.add_parser("delete", help="Delete a saved prompt")
    p_delete.add_argument("id", help="Prompt id")
    p_delete.set_defaults(func=cli_commands.cmd_delete)

    p_export = prompts_sub.add_parser("export", help="Export saved prompts to JSON")
    p_export.add_argument(
        "path", nargs="?", default=None, help="Output file (default: gemini-prompts.json)"
    )
    p_export.set_defaults(func=cli_commands.cmd_export)

    p_import = prompts_sub.add_parser("import", help="Replace saved prompts from a JSON file")
    p_import.add_argument("path", help="JSON file to import")
    p_import.set_defaults(func=cli_commands.cmd_import)

    p_run = prompts_sub.add_parser("run", help="Run a saved prompt on a file")
    p_run.add_argument("id", help="Prompt id")
    p_run.add_argument("file", help="File whose contents are sent as context")
    p_run.add_argument("--lines", default=None, help="Only send this line range, e.g. 10-40")
    p_run.set_defaults(func=cli_commands.cmd_run)

    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()
    _configure_logging(args.debug)

    if not args.command or not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.")
        sys.exit(130)
    except EnvironmentError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
