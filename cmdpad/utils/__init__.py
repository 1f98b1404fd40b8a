"""Utility functions and helpers for cmdpad."""

from .logging import logger
from .helpers import (
    format_duration,
    parse_assignments,
    ensure_directory_exists,
    safe_file_write,
    atomic_write_json,
)

__all__ = [
    "logger",
    "format_duration",
    "parse_assignments",
    "ensure_directory_exists",
    "safe_file_write",
    "atomic_write_json",
]
