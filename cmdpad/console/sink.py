"""In-memory console log of execution events."""

import datetime
import itertools
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from ..commands.events import FinishedEvent, OutputEvent, ProcessState, Subscription
from ..constants import STREAM_STDERR


class ConsoleKind(Enum):
    """Kind of a console entry, used by observers for styling."""
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    COMMAND = "command"


@dataclass(frozen=True)
class ConsoleEntry:
    id: str
    timestamp: datetime.datetime
    kind: ConsoleKind
    message: str


class ConsoleSink:
    """Ordered, append-only log shared by every observer surface.
    
    All appends go through a single lock, so entries keep the order in which
    append() was called regardless of the calling thread. Observers are
    notified outside the lock and only ever see entries in that order.
    """
    
    def __init__(self, max_entries: Optional[int] = None):
        self.max_entries = max_entries or None
        self._lock = threading.Lock()
        self._notify_lock = threading.RLock()
        self._entries: List[ConsoleEntry] = []
        self._sequence = itertools.count(1)
        self._append_listeners: List[tuple] = []
        self._clear_listeners: List[tuple] = []
    
    def append(self, kind: ConsoleKind, message: str) -> ConsoleEntry:
        """Append an entry and notify subscribers."""
        # Serializing notification keeps observers in lockstep with the log order
        with self._notify_lock:
            with self._lock:
                now = datetime.datetime.now()
                entry = ConsoleEntry(
                    id=f"{int(now.timestamp() * 1000)}-{next(self._sequence)}",
                    timestamp=now,
                    kind=ConsoleKind(kind),
                    message=message,
                )
                self._entries.append(entry)
                if self.max_entries and len(self._entries) > self.max_entries:
                    del self._entries[:len(self._entries) - self.max_entries]
                listeners = list(self._append_listeners)
            for _, listener in listeners:
                listener(entry)
        return entry
    
    def info(self, message: str) -> ConsoleEntry:
        return self.append(ConsoleKind.INFO, message)
    
    def success(self, message: str) -> ConsoleEntry:
        return self.append(ConsoleKind.SUCCESS, message)
    
    def error(self, message: str) -> ConsoleEntry:
        return self.append(ConsoleKind.ERROR, message)
    
    def warning(self, message: str) -> ConsoleEntry:
        return self.append(ConsoleKind.WARNING, message)
    
    def command(self, message: str) -> ConsoleEntry:
        return self.append(ConsoleKind.COMMAND, message)
    
    def snapshot(self) -> List[ConsoleEntry]:
        """Copy of the entries in insertion order."""
        with self._lock:
            return list(self._entries)
    
    def clear(self) -> None:
        """Remove all entries and tell subscribers to reset."""
        with self._notify_lock:
            with self._lock:
                self._entries.clear()
                listeners = list(self._clear_listeners)
            for _, listener in listeners:
                listener()
    
    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
    
    def subscribe(self, on_append: Callable[[ConsoleEntry], None],
                  on_clear: Optional[Callable[[], None]] = None) -> Subscription:
        """Observe appends (and optionally clears) until unsubscribed."""
        token = object()
        with self._lock:
            self._append_listeners.append((token, on_append))
            if on_clear is not None:
                self._clear_listeners.append((token, on_clear))
        
        def cancel(_subscription):
            with self._lock:
                self._append_listeners = [l for l in self._append_listeners if l[0] is not token]
                self._clear_listeners = [l for l in self._clear_listeners if l[0] is not token]
        
        return Subscription(cancel)
    
    def export_text(self) -> str:
        """Render the log as ``[HH:MM:SS] message`` lines."""
        return "\n".join(
            f"[{entry.timestamp.strftime('%H:%M:%S')}] {entry.message}" for entry in self.snapshot()
        )
    
    def bind_lifecycle(self, manager) -> List[Subscription]:
        """Mirror a lifecycle manager's output and finished events into the log."""
        def on_output(event: OutputEvent):
            kind = ConsoleKind.WARNING if event.stream == STREAM_STDERR else ConsoleKind.INFO
            message = event.chunk.rstrip("\n")
            if message:
                self.append(kind, f"[{event.command_id}] {message}")
        
        def on_finished(event: FinishedEvent):
            if event.state is ProcessState.KILLED:
                self.success(f"[{event.command_id}] Stopped")
            elif event.state is ProcessState.COMPLETED and event.exit_code == 0:
                self.success(f"[{event.command_id}] Finished")
            elif event.state is ProcessState.COMPLETED:
                self.error(f"[{event.command_id}] Exited with code {event.exit_code}")
            else:
                self.error(f"[{event.command_id}] Failed")
        
        return [
            manager.events.on_output(on_output),
            manager.events.on_finished(on_finished),
        ]


def create_console_sink(max_entries: Optional[int] = None) -> ConsoleSink:
    """Create an empty console sink."""
    return ConsoleSink(max_entries)
