"""
cmdpad - a command pad for parameterized shell commands.

Commands come from per-domain libraries (git, system, project). Each run
resolves the command template, asks for confirmation when the command looks
destructive, and executes it either to completion or as a tracked background
process that can be followed and stopped.
"""

__version__ = "1.0.0"
__author__ = "cmdpad Team"

# Main API imports
from .core.application import CmdPad, create_application
from .core.workflow import CommandRunner, RunOutcome, RunStatus
from .commands.lifecycle import ProcessLifecycleManager
from .console.sink import ConsoleSink

__all__ = [
    "CmdPad",
    "create_application",
    "CommandRunner",
    "RunOutcome",
    "RunStatus",
    "ProcessLifecycleManager",
    "ConsoleSink",
    "__version__",
]
