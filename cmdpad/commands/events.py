"""Typed lifecycle event channel for background processes."""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Union

from ..utils.logging import logger


class ProcessState(Enum):
    """Lifecycle states of a background process. Idle is the absence of an entry."""
    SPAWNING = "spawning"
    RUNNING = "running"
    COMPLETED = "completed"
    KILLED = "killed"
    FAILED = "failed"


@dataclass(frozen=True)
class OutputEvent:
    """A chunk of output read from one stream of a tracked process."""
    command_id: str
    stream: str
    chunk: str


@dataclass(frozen=True)
class FinishedEvent:
    """Terminal event of a tracked process. Emitted exactly once per process."""
    command_id: str
    state: ProcessState
    exit_code: Optional[int]


LifecycleEvent = Union[OutputEvent, FinishedEvent]


class Subscription:
    """Handle returned by subscribe(); call unsubscribe() to stop delivery."""
    
    def __init__(self, cancel: Callable[["Subscription"], None]):
        self._cancel = cancel
        self.active = True
    
    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._cancel(self)
    
    def __enter__(self) -> "Subscription":
        return self
    
    def __exit__(self, *exc_info) -> None:
        self.unsubscribe()


class _Listener:
    def __init__(self, event_type, handler, command_id, stream, subscription):
        self.event_type = event_type
        self.handler = handler
        self.command_id = command_id
        self.stream = stream
        self.subscription = subscription
    
    def wants(self, event: LifecycleEvent) -> bool:
        if not isinstance(event, self.event_type):
            return False
        if self.command_id is not None and event.command_id != self.command_id:
            return False
        if self.stream is not None and getattr(event, "stream", None) != self.stream:
            return False
        return True


class EventChannel:
    """Dispatches lifecycle events to subscribed handlers.
    
    Handlers run on the thread that publishes the event (a stream reader or
    a process waiter). Each stream of a process has a single reader thread,
    so chunks within a stream reach handlers in the order they were read.
    """
    
    def __init__(self):
        self._lock = threading.Lock()
        self._listeners: List[_Listener] = []
    
    def _subscribe(self, event_type, handler, command_id=None, stream=None) -> Subscription:
        subscription = Subscription(self._remove)
        listener = _Listener(event_type, handler, command_id, stream, subscription)
        with self._lock:
            self._listeners.append(listener)
        return subscription
    
    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            self._listeners = [l for l in self._listeners if l.subscription is not subscription]
    
    def on_output(self, handler: Callable[[OutputEvent], None],
                  command_id: Optional[str] = None,
                  stream: Optional[str] = None) -> Subscription:
        """Subscribe to output chunks, optionally filtered by command id and stream."""
        return self._subscribe(OutputEvent, handler, command_id, stream)
    
    def on_finished(self, handler: Callable[[FinishedEvent], None],
                    command_id: Optional[str] = None) -> Subscription:
        """Subscribe to terminal events, optionally filtered by command id."""
        return self._subscribe(FinishedEvent, handler, command_id)
    
    def publish(self, event: LifecycleEvent) -> None:
        with self._lock:
            listeners = [l for l in self._listeners if l.wants(event)]
        for listener in listeners:
            if not listener.subscription.active:
                continue
            try:
                listener.handler(event)
            except Exception as e:
                logger.error(f"Event handler failed for '{event.command_id}': {e}")
    
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

