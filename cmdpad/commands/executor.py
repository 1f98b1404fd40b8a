"""Command execution utilities for cmdpad."""

import os
import signal
import subprocess
from pathlib import Path
from typing import Optional, Union

from .errors import LifecycleError, SpawnError
from ..constants import TIMEOUT_EXIT_CODE
from ..utils.logging import logger

PathLike = Union[str, Path]

IS_POSIX = os.name != 'nt'


class CommandResult:
    """Represents the result of a synchronous command execution."""

    def __init__(self,
                 command: str,
                 exit_code: Optional[int],
                 stdout: str = "",
                 stderr: str = "",
                 error: Optional[LifecycleError] = None,
                 error_message: str = ""):
        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        self.error = error
        self.error_message = error_message or (str(error) if error else "")

    @property
    def output(self) -> str:
        """Combined stdout and stderr output."""
        combined = []
        if self.stdout.strip():
            combined.append(self.stdout.strip())
        if self.stderr.strip():
            combined.append(self.stderr.strip())
        return "\n".join(combined) if combined else ""

    @property
    def success(self) -> bool:
        """Whether the command ran and exited with status 0."""
        return self.exit_code == 0 and not self.error_message

    def __str__(self) -> str:
        if self.error_message:
            return f"Error: {self.error_message}"
        return f"Exit Code: {self.exit_code}. Output:\n{self.output if self.output else '(no output)'}"


class LaunchResult:
    """Outcome of a background launch or kill request."""

    def __init__(self, success: bool, error: Optional[LifecycleError] = None):
        self.success = success
        self.error = error

    @classmethod
    def ok(cls) -> "LaunchResult":
        return cls(True)

    @classmethod
    def failure(cls, error: LifecycleError) -> "LaunchResult":
        return cls(False, error)

    @property
    def error_message(self) -> str:
        return str(self.error) if self.error else ""

    def __bool__(self) -> bool:
        return self.success

    def __repr__(self) -> str:
        if self.success:
            return "LaunchResult(success=True)"
        return f"LaunchResult(success=False, error={self.error!r})"


def spawn_process(command: str, cwd: Optional[PathLike] = None, text: bool = True) -> subprocess.Popen:
    """Start a shell command in its own process group with piped output.

    Raises:
        OSError: If the OS cannot create the process (bad cwd, permissions)
    """
    return subprocess.Popen(
        command,
        shell=True,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        cwd=str(cwd) if cwd else None,
        text=text,
        # Output is not guaranteed to be valid UTF-8 (binary files, legacy encodings)
        encoding="utf-8" if text else None,
        errors="replace" if text else None,
        # New process group so signals reach the shell's children as well
        start_new_session=IS_POSIX,
    )


def send_signal(process: subprocess.Popen, force: bool = False) -> None:
    """Signal a process and its group: SIGTERM, or SIGKILL when ``force`` is set."""
    if process.poll() is not None:
        return
    if IS_POSIX:
        sig = signal.SIGKILL if force else signal.SIGTERM
        try:
            os.killpg(os.getpgid(process.pid), sig)
            return
        except (ProcessLookupError, PermissionError, OSError):
            pass
    try:
        if force:
            process.kill()
        else:
            process.terminate()
    except ProcessLookupError:
        pass


class CommandExecutor:
    """Runs commands to completion and captures their output."""

    def __init__(self, default_timeout: Optional[float] = None):
        """Initialize command executor.

        Args:
            default_timeout: Timeout in seconds applied when a call gives none;
                None or 0 waits for the process however long it takes
        """
        self.default_timeout = default_timeout or None

    def execute(self, command: str, cwd: Optional[PathLike] = None,
                timeout: Optional[float] = None,
                command_id: Optional[str] = None) -> CommandResult:
        """Execute a shell command and wait for it to exit.

        Args:
            command: Resolved shell command
            cwd: Working directory (inherits the current one if None)
            timeout: Caller imposed timeout in seconds; None uses the default,
                0 waits indefinitely even when a default is set
            command_id: Logical command identity, used for logging and errors

        Returns:
            CommandResult object with execution details
        """
        if timeout is None:
            timeout = self.default_timeout
        timeout = timeout or None

        logger.command(f"Executing command: {command}" + (f" (in {cwd})" if cwd else ""))

        try:
            process = spawn_process(command, cwd)
        except OSError as e:
            error = SpawnError(command_id, command, e.strerror or str(e))
            logger.error(str(error))
            return CommandResult(command=command, exit_code=None, error=error)

        try:
            stdout, stderr = process.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            error_msg = f"Command timed out after {timeout} seconds"
            logger.warning(error_msg)
            send_signal(process, force=True)
            stdout, stderr = process.communicate()
            return CommandResult(
                command=command,
                exit_code=TIMEOUT_EXIT_CODE,
                stdout=stdout or "",
                stderr=stderr or "",
                error_message=error_msg
            )

        result = CommandResult(
            command=command,
            exit_code=process.returncode,
            stdout=(stdout or "").strip(),
            stderr=(stderr or "").strip()
        )

        logger.debug(f"Command completed with exit code {result.exit_code}")
        return result


def create_command_executor(timeout: Optional[float] = None) -> CommandExecutor:
    """Create a command executor with the specified default timeout."""
    return CommandExecutor(timeout)
