"""Synchronous vs background execution heuristics."""

import re
from enum import Enum
from typing import Iterable, List, Optional, Pattern

from ..utils.logging import logger

DEFAULT_CONTINUOUS_PATTERNS = [
    # Development servers
    r'\bnpm\s+(start|run\s+(dev|serve|start|watch))\b',
    r'\b(yarn|pnpm)\s+(run\s+)?(dev|start|serve|watch)\b',
    r'\bphp\s+artisan\s+serve\b',
    r'\bpython[0-9.]*\s+-m\s+http\.server\b',
    r'\bmanage\.py\s+runserver\b',
    r'\bflask\s+run\b',
    r'\b(uvicorn|gunicorn|hypercorn)\b',
    r'\brails\s+(server|s)\b',
    r'\bng\s+serve\b',
    r'\bvite(\s|$)(?!.*\bbuild\b)',
    r'\bnext\s+dev\b',
    r'\bhugo\s+server\b',
    r'\bjekyll\s+serve\b',
    # Watchers
    r'--watch\b',
    r'\bnodemon\b',
    r'^\s*watch\s',
    r'\btail\s+-[a-zA-Z]*[fF]',
    # Containers attached to the terminal
    r'\bdocker(-|\s+)compose\s+up\b(?!.*(\s-d\b|--detach))',
    # Power assertions that hold until interrupted
    r'\bcaffeinate\b',
]


class ExecutionMode(Enum):
    """How a resolved command is executed."""
    SYNC = "sync"
    BACKGROUND = "background"


class ExecutionModeSelector:
    """Guesses whether a command runs until it is stopped."""
    
    def __init__(self, extra_patterns: Optional[Iterable[str]] = None):
        self._patterns: List[Pattern] = [re.compile(p) for p in DEFAULT_CONTINUOUS_PATTERNS]
        for pattern in extra_patterns or []:
            self.add_pattern(pattern)
    
    def is_continuous(self, command: str) -> bool:
        """True if the command looks like a server, watcher or other long-lived process."""
        return any(p.search(command) for p in self._patterns)
    
    def select_mode(self, command: str, force: Optional[ExecutionMode] = None) -> ExecutionMode:
        """Pick the execution mode; an explicit ``force`` always wins over the heuristic."""
        if force is not None:
            logger.debug(f"Execution mode forced to {force.value} for: {command}")
            return force
        mode = ExecutionMode.BACKGROUND if self.is_continuous(command) else ExecutionMode.SYNC
        logger.debug(f"Execution mode {mode.value} selected for: {command}")
        return mode
    
    def add_pattern(self, pattern: str):
        """Add a custom continuous-process pattern."""
        self._patterns.append(re.compile(pattern))
        logger.debug(f"Added continuous pattern: {pattern}")


def create_mode_selector(extra_patterns: Optional[Iterable[str]] = None) -> ExecutionModeSelector:
    """Create a mode selector with the default heuristics."""
    return ExecutionModeSelector(extra_patterns)
