"""Command library storage for cmdpad."""

from .store import CommandLibrary, create_command_library
from .defaults import DEFAULT_LIBRARIES

__all__ = [
    "CommandLibrary",
    "create_command_library",
    "DEFAULT_LIBRARIES",
]
