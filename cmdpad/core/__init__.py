"""Core application logic for cmdpad."""

from .application import CmdPad, create_application
from .workflow import CommandRunner, RunOutcome, RunStatus
from .repository import RepositoryInfo, get_repository_info, is_git_repository

__all__ = [
    "CmdPad",
    "create_application",
    "CommandRunner",
    "RunOutcome",
    "RunStatus",
    "RepositoryInfo",
    "get_repository_info",
    "is_git_repository",
]
