"""Error taxonomy for command resolution and process lifecycle."""

from typing import Iterable, Optional


class CommandPadError(Exception):
    """Base class for all cmdpad errors."""


class TemplateError(CommandPadError):
    """A template could not be resolved under the active missing-value policy."""

    def __init__(self, missing: Iterable[str], template: str = ""):
        self.missing = list(missing)
        self.template = template
        super().__init__(f"No value supplied for: {', '.join(self.missing)}")


class LifecycleError(CommandPadError):
    """Failure reported by the process lifecycle manager.

    These are returned inside result objects rather than raised across the
    manager boundary, so callers can render them without a try block.
    """

    def __init__(self, command_id: Optional[str], message: str):
        self.command_id = command_id
        super().__init__(message)


class SpawnError(LifecycleError):
    """The OS refused or failed to create the process."""

    def __init__(self, command_id: Optional[str], command: str, reason: str):
        self.command = command
        self.reason = reason
        super().__init__(command_id, f"Failed to start '{command}': {reason}")


class AlreadyRunningError(LifecycleError):
    """A background process is already tracked for this command id."""

    def __init__(self, command_id: str):
        super().__init__(command_id, f"Command '{command_id}' is already running")


class NotFoundError(LifecycleError):
    """No background process is tracked for this command id."""

    def __init__(self, command_id: str):
        super().__init__(command_id, f"No running process for command '{command_id}'")
