"""Console log for cmdpad."""

from .sink import ConsoleEntry, ConsoleKind, ConsoleSink, create_console_sink

__all__ = [
    "ConsoleEntry",
    "ConsoleKind",
    "ConsoleSink",
    "create_console_sink",
]
