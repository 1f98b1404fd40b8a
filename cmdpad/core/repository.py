"""Git repository helpers for the source-control pad."""

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..utils.logging import logger


@dataclass
class RepositoryInfo:
    """Branch and dirty state of a repository."""
    path: str
    branch: str = "unknown"
    has_uncommitted_changes: bool = False
    error: Optional[str] = None


def is_git_repository(path: Union[str, Path]) -> bool:
    """True if the directory contains a .git directory."""
    try:
        return (Path(path) / ".git").is_dir()
    except OSError:
        return False


def _git(path: Union[str, Path], *args: str) -> str:
    process = subprocess.run(
        ["git", *args],
        cwd=str(path),
        capture_output=True,
        text=True,
        timeout=10,
    )
    return process.stdout


def get_repository_info(path: Union[str, Path]) -> RepositoryInfo:
    """Read the current branch and whether there are uncommitted changes."""
    try:
        branch = _git(path, "branch", "--show-current").strip()
        status = _git(path, "status", "--porcelain")
        return RepositoryInfo(
            path=str(path),
            branch=branch or "unknown",
            has_uncommitted_changes=bool(status.strip()),
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"Could not read repository info for {path}: {e}")
        return RepositoryInfo(path=str(path), error=str(e))
