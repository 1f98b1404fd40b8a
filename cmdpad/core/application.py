"""Main application class for cmdpad."""

import shlex
import signal
import sys
from typing import Callable, Dict, Optional
from pathlib import Path

from ..commands.confirmation import create_confirmation_gate
from ..commands.events import ProcessState
from ..commands.lifecycle import create_lifecycle_manager
from ..commands.models import CommandDomain, CommandSpec, VariableKind
from ..commands.modes import ExecutionMode, create_mode_selector
from ..config.manager import create_config_manager
from ..console.sink import ConsoleEntry, ConsoleKind, create_console_sink
from ..core.repository import get_repository_info, is_git_repository
from ..core.workflow import CommandRunner, RunOutcome, RunStatus
from ..library.store import create_command_library
from ..utils.helpers import format_duration, parse_assignments
from ..utils.logging import logger
from ..constants import CLR_BOLD_CYAN, CLR_RESET

HELP_TEXT = """\
Commands:
  list [domain]              List commands (domains: git, system, project, prompts)
  run <id> [name=value ...]  Run a command; missing values are asked for
  start <id> [name=value ...]
                             Run a command in the background regardless of its kind
  stop <id>                  Stop a background command
  ps                         Show background commands
  console                    Show the console log
  clear                      Clear the console log
  cd <directory>             Change the working directory for commands
  help                       Show this help
  quit                       Stop background commands and exit"""


class CmdPad:
    """Main application class for cmdpad."""

    def __init__(self, config_dir: Optional[str] = None, debug: bool = False,
                 assume_yes: bool = False, interactive: bool = True,
                 input_func: Callable[[str], str] = input,
                 install_signal_handlers: bool = False):
        """Initialize the cmdpad application.

        Args:
            config_dir: Custom configuration directory path
            debug: Enable debug logging
            assume_yes: Run commands needing confirmation without asking
            interactive: Whether the user can be prompted on the terminal
            input_func: Source of user input
            install_signal_handlers: Stop background commands on SIGTERM/SIGHUP
        """
        logger.set_debug(debug)

        config_path = Path(config_dir) if config_dir else None
        self.config_manager = create_config_manager(config_path)
        self.config = self.config_manager.config

        if not debug and self.config.get("enable_debug", False):
            logger.set_debug(True)

        self.input_func = input_func
        self.interactive = interactive
        self.cwd: Optional[Path] = self.config.get("default_cwd")

        self.console = create_console_sink(self.config.get("console_max_entries"))
        self.console.subscribe(self._echo_entry)
        self.manager = create_lifecycle_manager(
            grace_period=self.config["kill_grace_period"],
            command_timeout=self.config["command_timeout"],
        )
        self.console.bind_lifecycle(self.manager)
        self.library = create_command_library(self.config["library_dir"])
        self.runner = CommandRunner(
            self.manager,
            self.console,
            mode_selector=create_mode_selector(self.config["continuous_patterns"]),
            extra_dangerous_patterns=self.config["dangerous_patterns"],
            confirm=create_confirmation_gate(assume_yes, interactive, input_func),
            command_timeout=self.config["command_timeout"],
        )

        if install_signal_handlers:
            self._setup_signal_handlers()

        logger.debug("Application initialization complete")

    # Console mirroring

    def _echo_entry(self, entry: ConsoleEntry) -> None:
        if entry.kind is ConsoleKind.COMMAND:
            logger.command(entry.message)
        elif entry.kind is ConsoleKind.SUCCESS:
            logger.success(entry.message)
        elif entry.kind is ConsoleKind.ERROR:
            logger.error(entry.message)
        elif entry.kind is ConsoleKind.WARNING:
            logger.warning(entry.message)
        else:
            logger.output(entry.message)

    # Library access

    def find_command(self, command_id: str, domain: Optional[CommandDomain] = None) -> Optional[CommandSpec]:
        return self.library.find(command_id, domain)

    def list_commands(self, domain: Optional[CommandDomain] = None) -> None:
        """Print the commands of one domain, or of every domain."""
        domains = [domain] if domain else list(CommandDomain)
        for dom in domains:
            logger.system(f"{dom.value} commands ({self.library.path_for(dom)}):")
            for spec in self.library.load(dom):
                marker = "!" if spec.requires_confirmation else " "
                running = " [running]" if self.manager.is_running(spec.id) else ""
                preview = self.runner.template_engine.preview(spec.template, spec.variables)
                first_line = preview.splitlines()[0] if preview else ""
                logger.system(f" {marker} {spec.id:<24} {first_line}{running}")

    def collect_values(self, spec: CommandSpec, provided: Dict[str, str]) -> Dict[str, str]:
        """Ask for every variable without a provided value."""
        values = dict(provided)
        for variable in spec.variables:
            if variable.name in values:
                continue
            if not self.interactive:
                continue
            if variable.kind is VariableKind.DROPDOWN:
                choices = ", ".join(f"{i}) {opt}" for i, opt in enumerate(variable.options, 1))
                answer = self.input_func(f"{variable.label} [{choices}] (default {variable.default_value}): ").strip()
                if not answer:
                    values[variable.name] = variable.default_value
                elif answer.isdigit() and 1 <= int(answer) <= len(variable.options):
                    values[variable.name] = variable.options[int(answer) - 1]
                else:
                    values[variable.name] = answer
            elif variable.kind is VariableKind.TEXT:
                values[variable.name] = self.input_func(f"{variable.label}: ")
            else:
                raise ValueError(f"Unknown variable kind: {variable.kind!r}")
        return values

    # Execution

    def run_command(self, command_id: str, values: Optional[Dict[str, str]] = None,
                    cwd: Optional[str] = None,
                    force_mode: Optional[ExecutionMode] = None) -> Optional[RunOutcome]:
        """Look up a command, collect its values and run it."""
        spec = self.find_command(command_id)
        if spec is None:
            logger.error(f"Unknown command: {command_id}")
            return None
        values = self.collect_values(spec, values or {})
        return self.runner.run(spec, values, cwd=cwd or self.cwd, force_mode=force_mode)

    def run_single_command(self, command_id: str, values: Optional[Dict[str, str]] = None,
                           cwd: Optional[str] = None,
                           force_mode: Optional[ExecutionMode] = None) -> bool:
        """Run one command and, if it went to the background, follow it until it exits.

        Returns:
            True if the command succeeded (or was stopped by the user)
        """
        finished = []
        with self.manager.events.on_finished(finished.append, command_id=command_id):
            outcome = self.run_command(command_id, values, cwd, force_mode)
            if outcome is None:
                return False
            if outcome.status is not RunStatus.STARTED:
                return outcome.success

            logger.system("Following output; press Ctrl+C to stop.")
            try:
                self.manager.wait_for(command_id)
            except KeyboardInterrupt:
                self.runner.stop(command_id)
                self.manager.wait_for(command_id, self.manager.grace_period * 2)

        if not finished:
            return False
        event = finished[0]
        return event.state is ProcessState.KILLED or event.exit_code == 0

    def show_processes(self) -> None:
        ids = self.manager.running_ids()
        if not ids:
            logger.system("No background commands running.")
            return
        for command_id in ids:
            info = self.manager.get(command_id)
            if info is None:
                continue
            logger.system(f"{command_id:<24} pid {info.pid:<8} up {format_duration(info.uptime):<10} {info.command}")

    def change_directory(self, directory: str) -> None:
        path = Path(directory).expanduser()
        if not path.is_absolute() and self.cwd:
            path = self.cwd / path
        if not path.is_dir():
            logger.error(f"Not a directory: {path}")
            return
        self.cwd = path.resolve()
        logger.system(f"Working directory: {self.cwd}")
        if is_git_repository(self.cwd):
            info = get_repository_info(self.cwd)
            dirty = " (uncommitted changes)" if info.has_uncommitted_changes else ""
            logger.system(f"Git branch: {info.branch}{dirty}")

    def handle_line(self, line: str) -> bool:
        """Handle one interactive command line. Returns False when the session should end."""
        try:
            parts = shlex.split(line)
        except ValueError as e:
            logger.error(f"Could not parse input: {e}")
            return True
        if not parts:
            return True

        action, args = parts[0].lower(), parts[1:]

        if action in ['exit', 'quit', 'q']:
            return False
        elif action == 'help':
            logger.system(HELP_TEXT)
        elif action == 'list':
            domain = None
            if args:
                try:
                    domain = CommandDomain(args[0])
                except ValueError:
                    logger.error(f"Unknown domain: {args[0]}")
                    return True
            self.list_commands(domain)
        elif action in ['run', 'start']:
            if not args:
                logger.warning(f"Usage: {action} <id> [name=value ...]")
                return True
            try:
                values = parse_assignments(args[1:])
            except ValueError as e:
                logger.error(str(e))
                return True
            force_mode = ExecutionMode.BACKGROUND if action == 'start' else None
            self.run_command(args[0], values, force_mode=force_mode)
        elif action == 'stop':
            if not args:
                logger.warning("Usage: stop <id>")
                return True
            self.runner.stop(args[0])
        elif action == 'ps':
            self.show_processes()
        elif action == 'console':
            text = self.console.export_text()
            print(text if text else "(console is empty)")
        elif action == 'clear':
            self.console.clear()
            logger.system("Console cleared.")
        elif action == 'cd':
            if not args:
                logger.warning("Usage: cd <directory>")
                return True
            self.change_directory(args[0])
        else:
            logger.warning(f"Unknown command '{action}'. Type 'help' for a list of commands.")
        return True

    def run_interactive_mode(self) -> None:
        """Run the application in interactive mode."""
        logger.system("cmdpad interactive mode. Type 'help' for commands, 'quit' to exit.")

        try:
            while True:
                try:
                    user_input = self.input_func(f"\n{CLR_BOLD_CYAN}cmdpad>{CLR_RESET} ").strip()
                    if not self.handle_line(user_input):
                        logger.system("Goodbye!")
                        break
                except KeyboardInterrupt:
                    logger.system("\nUse 'quit' to stop gracefully")
                    continue
                except EOFError:
                    logger.system("\nGoodbye!")
                    break
        finally:
            self.close()

    def close(self) -> None:
        """Stop every background command."""
        self.manager.shutdown(self.manager.grace_period)

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""
        def signal_handler(sig, frame):
            logger.system(f"Received signal {sig}, shutting down gracefully...")
            self.close()
            sys.exit(0)

        signal.signal(signal.SIGTERM, signal_handler)

        # Handle SIGHUP on Unix systems
        if hasattr(signal, 'SIGHUP'):
            signal.signal(signal.SIGHUP, signal_handler)

    def print_config_summary(self) -> None:
        """Print a summary of the current configuration."""
        logger.system("Configuration Summary:")
        for line in self.config_manager.summary():
            logger.system(f"  {line}")


def create_application(config_dir: Optional[str] = None, debug: bool = False,
                       assume_yes: bool = False, interactive: bool = True,
                       install_signal_handlers: bool = False) -> CmdPad:
    """Create and initialize a CmdPad application instance."""
    return CmdPad(config_dir, debug, assume_yes=assume_yes, interactive=interactive,
                  install_signal_handlers=install_signal_handlers)
