"""Command-line interface for cmdpad."""

import argparse
import sys
from typing import List, Optional

from colorama import init as colorama_init

from .commands.models import CommandDomain
from .commands.modes import ExecutionMode
from .core.application import create_application
from .utils.helpers import parse_assignments
from .utils.logging import logger
from . import __version__


def create_parser() -> argparse.ArgumentParser:
    """Create the command-line argument parser."""
    parser = argparse.ArgumentParser(
        description="cmdpad: run parameterized shell commands from your command library.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cmdpad --list                                  # List every command
  cmdpad --list --domain project                 # List project commands
  cmdpad git-checkout --set branch=develop       # Run a command with a value
  cmdpad python-serve --set port=8000 --cwd site # Start a server and follow it
  cmdpad git-push --set branch=main --yes        # Skip the confirmation prompt
  cmdpad                                         # Interactive mode

Execution:
  Servers and watchers are detected and run in the background; everything
  else runs to completion. Use --background or --foreground to override.
  Commands marked as requiring confirmation, and commands matching a
  destructive pattern, ask before running unless --yes is given.
        """
    )

    parser.add_argument(
        'command_id',
        nargs='?',
        help="Id of the command to run. If empty, enters interactive mode."
    )

    parser.add_argument(
        '-s', '--set',
        dest='values',
        action='append',
        default=[],
        metavar='NAME=VALUE',
        help="Value for a command variable (repeatable)"
    )

    parser.add_argument(
        '--cwd',
        type=str,
        help="Working directory for the command"
    )

    parser.add_argument(
        '--timeout',
        type=float,
        metavar='SECONDS',
        help="Timeout for commands that run to completion (overrides command_timeout)"
    )

    parser.add_argument(
        '-y', '--yes',
        action='store_true',
        help="Run commands that need confirmation without asking"
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        '-b', '--background',
        action='store_true',
        help="Run as a background process regardless of the command kind"
    )
    mode.add_argument(
        '-f', '--foreground',
        action='store_true',
        help="Run to completion regardless of the command kind"
    )

    parser.add_argument(
        '-l', '--list',
        action='store_true',
        help="List available commands and exit"
    )

    parser.add_argument(
        '--domain',
        choices=[d.value for d in CommandDomain],
        help="Restrict --list to one command domain"
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'cmdpad {__version__}'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help="Enable debug logging output"
    )

    parser.add_argument(
        '--config-dir',
        type=str,
        help="Custom configuration directory path"
    )

    parser.add_argument(
        '--config-summary',
        action='store_true',
        help="Show configuration summary and exit"
    )

    return parser


def main(args: Optional[List[str]] = None) -> None:
    """Main entry point for the CLI."""
    # Initialize colorama for cross-platform colored output
    colorama_init(autoreset=True)

    parser = create_parser()
    parsed_args = parser.parse_args(args)

    try:
        values = parse_assignments(parsed_args.values)
    except ValueError as e:
        parser.error(str(e))

    try:
        app = create_application(
            config_dir=parsed_args.config_dir,
            debug=parsed_args.debug,
            assume_yes=parsed_args.yes,
            interactive=sys.stdin.isatty(),
            install_signal_handlers=True,
        )
    except SystemExit:
        raise
    except Exception as e:
        logger.error(f"Failed to initialize cmdpad: {e}")
        sys.exit(1)

    if parsed_args.timeout is not None:
        if parsed_args.timeout < 0:
            parser.error("--timeout must be a non-negative number")
        # 0 is passed through so it overrides a configured command_timeout
        app.runner.command_timeout = parsed_args.timeout

    if parsed_args.config_summary:
        app.print_config_summary()
        return

    if parsed_args.list:
        domain = CommandDomain(parsed_args.domain) if parsed_args.domain else None
        app.list_commands(domain)
        return

    if parsed_args.command_id:
        force_mode = None
        if parsed_args.background:
            force_mode = ExecutionMode.BACKGROUND
        elif parsed_args.foreground:
            force_mode = ExecutionMode.SYNC

        try:
            success = app.run_single_command(
                parsed_args.command_id, values, cwd=parsed_args.cwd, force_mode=force_mode
            )
        finally:
            app.close()
        sys.exit(0 if success else 1)
    else:
        app.run_interactive_mode()

    logger.system("cmdpad session ended.")


if __name__ == "__main__":
    main()
