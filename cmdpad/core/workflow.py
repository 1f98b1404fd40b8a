"""Runs library commands: resolve, classify, confirm, then execute."""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Union

from ..commands.confirmation import ConfirmCallback
from ..commands.errors import AlreadyRunningError, TemplateError
from ..commands.executor import CommandResult, LaunchResult
from ..commands.lifecycle import ProcessLifecycleManager
from ..commands.models import CommandDomain, CommandSpec
from ..commands.modes import ExecutionMode, ExecutionModeSelector
from ..commands.safety import RiskClassifier
from ..commands.template import TemplateEngine
from ..console.sink import ConsoleSink
from ..utils.logging import logger

PathLike = Union[str, Path]

SYSTEM_PREFIX = re.compile(r'^System:\s*', re.IGNORECASE)


class RunStatus(Enum):
    """What happened to a run request."""
    COMPLETED = "completed"              # synchronous command exited (any exit code)
    STARTED = "started"                  # background process launched
    DECLINED = "declined"                # confirmation refused
    ALREADY_RUNNING = "already_running"  # background process with this id exists
    FAILED = "failed"                    # could not resolve or spawn


@dataclass
class RunOutcome:
    status: RunStatus
    command: str = ""
    mode: Optional[ExecutionMode] = None
    result: Optional[CommandResult] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        if self.status is RunStatus.STARTED:
            return True
        if self.status is RunStatus.COMPLETED:
            return self.result is not None and self.result.success
        return False


def normalize_command(command: str, domain: CommandDomain) -> str:
    """Trim the command; system commands may carry a ``System:`` prefix."""
    command = command.strip()
    if domain is CommandDomain.SYSTEM:
        command = SYSTEM_PREFIX.sub('', command).strip()
    return command


class CommandRunner:
    """Sequences template resolution, risk gating and execution for one pad."""

    def __init__(self, manager: ProcessLifecycleManager, console: ConsoleSink,
                 template_engine: Optional[TemplateEngine] = None,
                 mode_selector: Optional[ExecutionModeSelector] = None,
                 classifiers: Optional[Dict[CommandDomain, RiskClassifier]] = None,
                 extra_dangerous_patterns: Optional[Dict[CommandDomain, Iterable[str]]] = None,
                 confirm: Optional[ConfirmCallback] = None,
                 default_cwd: Optional[PathLike] = None,
                 command_timeout: Optional[float] = None):
        self.manager = manager
        self.console = console
        self.template_engine = template_engine or TemplateEngine()
        self.mode_selector = mode_selector or ExecutionModeSelector()
        self.classifiers = dict(classifiers or {})
        for domain in CommandDomain:
            if domain not in self.classifiers:
                self.classifiers[domain] = RiskClassifier(domain, extra_dangerous_patterns)
        self.confirm = confirm
        self.default_cwd = default_cwd
        self.command_timeout = command_timeout or None

    def prepare(self, spec: CommandSpec, values: Mapping[str, Optional[str]]) -> str:
        """Resolve a spec's template into the command that would run.

        Raises:
            TemplateError: If the engine's policy rejects missing values
            ValueError: If a dropdown value is not one of its options, or the
                spec belongs to the prompts domain
        """
        if spec.domain is CommandDomain.PROMPTS:
            raise ValueError(f"'{spec.id}' is a prompt, not a command")

        errors = self.template_engine.validate_values(spec.variables, values)
        if errors:
            raise ValueError("; ".join(f"{name}: {msg}" for name, msg in errors.items()))

        resolved = self.template_engine.resolve(spec.template, spec.variables, values)
        return normalize_command(resolved, spec.domain)

    def run(self, spec: CommandSpec, values: Optional[Mapping[str, Optional[str]]] = None,
            cwd: Optional[PathLike] = None,
            force_mode: Optional[ExecutionMode] = None,
            confirm: Optional[ConfirmCallback] = None) -> RunOutcome:
        """Resolve, gate and execute a command from the library.

        Args:
            spec: Command to run
            values: Variable values keyed by name
            cwd: Working directory (falls back to the runner's default)
            force_mode: Execute in this mode regardless of the heuristic
            confirm: Confirmation gate for this run (falls back to the runner's)

        Returns:
            RunOutcome describing what happened
        """
        values = values or {}
        cwd = cwd or self.default_cwd

        try:
            command = self.prepare(spec, values)
        except (TemplateError, ValueError) as e:
            self.console.error(f"{spec.name}: {e}")
            return RunOutcome(RunStatus.FAILED, error=str(e))

        leftover = self.template_engine.unresolved_placeholders(command)
        if leftover:
            self.console.warning(f"{spec.name}: undeclared placeholders left in command: {', '.join(leftover)}")

        classifier = self.classifiers[spec.domain]
        if classifier.needs_confirmation(spec, command):
            pattern = classifier.matched_pattern(command)
            reason = (f"Matches destructive pattern: {pattern}" if pattern
                      else "This command is marked as requiring confirmation.")
            gate = confirm or self.confirm
            if gate is None or not gate(spec, command, reason):
                self.console.warning(f"Cancelled: {command}")
                return RunOutcome(RunStatus.DECLINED, command=command)

        mode = self.mode_selector.select_mode(command, force_mode)
        self.console.command(f"$ {command}")

        if mode is ExecutionMode.BACKGROUND:
            return self._run_background(spec, command, cwd)
        return self._run_sync(spec, command, cwd)

    def _run_background(self, spec: CommandSpec, command: str, cwd: Optional[PathLike]) -> RunOutcome:
        launch = self.manager.execute_background(spec.id, command, cwd)
        if launch.success:
            self.console.info(f"{spec.name} started in the background")
            return RunOutcome(RunStatus.STARTED, command=command, mode=ExecutionMode.BACKGROUND)

        if isinstance(launch.error, AlreadyRunningError):
            self.console.warning(f"{spec.name} is already running")
            return RunOutcome(RunStatus.ALREADY_RUNNING, command=command,
                              mode=ExecutionMode.BACKGROUND, error=launch.error_message)

        self.console.error(launch.error_message)
        return RunOutcome(RunStatus.FAILED, command=command,
                          mode=ExecutionMode.BACKGROUND, error=launch.error_message)

    def _run_sync(self, spec: CommandSpec, command: str, cwd: Optional[PathLike]) -> RunOutcome:
        result = self.manager.execute_sync(command, cwd, self.command_timeout, spec.id)
        if result.error is not None:
            self.console.error(result.error_message)
            return RunOutcome(RunStatus.FAILED, command=command, mode=ExecutionMode.SYNC,
                              result=result, error=result.error_message)

        if result.stdout:
            self.console.info(result.stdout)
        if result.stderr:
            # git and friends write progress to stderr on success
            if result.success:
                self.console.info(result.stderr)
            else:
                self.console.error(result.stderr)

        if result.success:
            self.console.success(f"{spec.name} completed")
        elif result.error_message:
            self.console.error(f"{spec.name}: {result.error_message}")
        else:
            self.console.error(f"{spec.name} failed with exit code {result.exit_code}")
        return RunOutcome(RunStatus.COMPLETED, command=command, mode=ExecutionMode.SYNC, result=result)

    def stop(self, command_id: str) -> LaunchResult:
        """Stop a background command started by this runner."""
        outcome = self.manager.kill(command_id)
        if outcome.success:
            self.console.info(f"Stopping {command_id}...")
        else:
            self.console.warning(outcome.error_message)
        return outcome

    def toggle(self, spec: CommandSpec, values: Optional[Mapping[str, Optional[str]]] = None,
               cwd: Optional[PathLike] = None,
               force_mode: Optional[ExecutionMode] = None) -> Union[RunOutcome, LaunchResult]:
        """Pad button behaviour: stop the command if it is running, otherwise run it."""
        if self.manager.is_running(spec.id):
            logger.debug(f"'{spec.id}' is running; stopping it instead")
            return self.stop(spec.id)
        return self.run(spec, values, cwd, force_mode)
