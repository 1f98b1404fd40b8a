"""Background process tracking, output streaming and cancellation."""

import codecs
import datetime
import subprocess
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from .errors import AlreadyRunningError, NotFoundError, SpawnError
from .events import EventChannel, FinishedEvent, OutputEvent, ProcessState
from .executor import (
    CommandExecutor, CommandResult, LaunchResult, create_command_executor, send_signal, spawn_process
)
from ..constants import (
    DEFAULT_KILL_GRACE_PERIOD, READ_CHUNK_SIZE, STREAM_STDERR, STREAM_STDOUT
)
from ..utils.logging import logger

PathLike = Union[str, Path]

# How long the waiter lets readers drain after exit. Grandchildren that
# inherited the pipes can hold them open indefinitely.
DRAIN_TIMEOUT = 5.0

# Per-stream cap on output kept in memory for a running process
MAX_BUFFERED_CHARS = 1_000_000


class RunningProcess:
    """A tracked background process.

    Each output buffer is written only by the reader thread of its stream.
    """

    def __init__(self, command_id: str, command: str, process: subprocess.Popen):
        self.command_id = command_id
        self.command = command
        self.process = process
        self.started_at = datetime.datetime.now()
        self.state = ProcessState.SPAWNING
        self.kill_requested = False
        self.exit_code: Optional[int] = None
        self.output: Dict[str, List[str]] = {STREAM_STDOUT: [], STREAM_STDERR: []}
        self._buffered: Dict[str, int] = {STREAM_STDOUT: 0, STREAM_STDERR: 0}
        self.readers: List[threading.Thread] = []
        self.kill_timer: Optional[threading.Timer] = None
        self.finished = threading.Event()

    def buffer(self, stream: str, chunk: str) -> None:
        chunks = self.output[stream]
        chunks.append(chunk)
        self._buffered[stream] += len(chunk)
        while self._buffered[stream] > MAX_BUFFERED_CHARS and len(chunks) > 1:
            self._buffered[stream] -= len(chunks.pop(0))

    def output_text(self, stream: Optional[str] = None) -> str:
        """Accumulated output of one stream, or stdout followed by stderr."""
        if stream is not None:
            return "".join(list(self.output[stream]))
        return self.output_text(STREAM_STDOUT) + self.output_text(STREAM_STDERR)


@dataclass(frozen=True)
class ProcessInfo:
    """Read-only snapshot of a running process."""
    command_id: str
    command: str
    pid: int
    started_at: datetime.datetime
    state: ProcessState
    stdout: str
    stderr: str

    @property
    def uptime(self) -> float:
        return (datetime.datetime.now() - self.started_at).total_seconds()


class ProcessLifecycleManager:
    """Spawns commands and tracks background processes by command id.

    At most one background process exists per command id. The running set is
    only touched under ``_lock``; spawning, reading and exit detection happen
    on worker threads so no public method blocks on a running process,
    except ``execute_sync`` which waits by definition.
    """

    def __init__(self, grace_period: float = DEFAULT_KILL_GRACE_PERIOD,
                 events: Optional[EventChannel] = None,
                 executor: Optional[CommandExecutor] = None):
        """Initialize the manager.

        Args:
            grace_period: Seconds between SIGTERM and SIGKILL when killing
            events: Channel lifecycle events are published on
            executor: Executor used for synchronous commands
        """
        self.grace_period = grace_period
        self.events = events or EventChannel()
        self.executor = executor or CommandExecutor()
        self._lock = threading.Lock()
        self._running: Dict[str, RunningProcess] = {}

    # Synchronous execution

    def execute_sync(self, command: str, cwd: Optional[PathLike] = None,
                     timeout: Optional[float] = None,
                     command_id: Optional[str] = None) -> CommandResult:
        """Run a command to completion. Never enters the running set."""
        return self.executor.execute(command, cwd=cwd, timeout=timeout, command_id=command_id)

    # Background execution

    def execute_background(self, command_id: str, command: str,
                           cwd: Optional[PathLike] = None) -> LaunchResult:
        """Spawn a tracked background process and return once it has started.

        Returns:
            LaunchResult carrying AlreadyRunningError if the id is tracked,
            or SpawnError if the OS could not create the process
        """
        with self._lock:
            if command_id in self._running:
                logger.warning(f"Command '{command_id}' is already running")
                return LaunchResult.failure(AlreadyRunningError(command_id))

            try:
                process = spawn_process(command, cwd, text=False)
            except OSError as e:
                error = SpawnError(command_id, command, e.strerror or str(e))
                logger.error(str(error))
                return LaunchResult.failure(error)

            entry = RunningProcess(command_id, command, process)
            self._running[command_id] = entry

            for stream_name, pipe in ((STREAM_STDOUT, process.stdout), (STREAM_STDERR, process.stderr)):
                reader = threading.Thread(
                    target=self._read_stream, args=(entry, stream_name, pipe),
                    name=f"cmdpad-{command_id}-{stream_name}", daemon=True,
                )
                entry.readers.append(reader)
                reader.start()

            threading.Thread(
                target=self._wait, args=(entry,),
                name=f"cmdpad-{command_id}-waiter", daemon=True,
            ).start()
            entry.state = ProcessState.RUNNING

        logger.process(f"Started '{command_id}' (pid {process.pid}): {command}")
        return LaunchResult.ok()

    def kill(self, command_id: str, force: bool = False) -> LaunchResult:
        """Request termination of a tracked process.

        Sends SIGTERM to the process group and escalates to SIGKILL if the
        process is still alive after the grace period. The terminal event is
        published by the waiter once the process has actually exited.
        """
        with self._lock:
            entry = self._running.get(command_id)
            if entry is None:
                logger.debug(f"Kill requested for untracked command '{command_id}'")
                return LaunchResult.failure(NotFoundError(command_id))

            if entry.process.poll() is not None:
                # Exit already observed; the waiter reports it as completed
                return LaunchResult.ok()

            first_request = not entry.kill_requested
            entry.kill_requested = True
            send_signal(entry.process, force=force)

            if first_request and not force:
                entry.kill_timer = threading.Timer(self.grace_period, self._force_kill, args=(entry,))
                entry.kill_timer.daemon = True
                entry.kill_timer.start()

        logger.process(f"Stopping '{command_id}' (pid {entry.process.pid})")
        return LaunchResult.ok()

    def is_running(self, command_id: str) -> bool:
        with self._lock:
            return command_id in self._running

    def running_ids(self) -> List[str]:
        with self._lock:
            return list(self._running)

    def get(self, command_id: str) -> Optional[ProcessInfo]:
        """Snapshot of a tracked process, or None if the id is not running."""
        with self._lock:
            entry = self._running.get(command_id)
        if entry is None:
            return None
        return ProcessInfo(
            command_id=entry.command_id,
            command=entry.command,
            pid=entry.process.pid,
            started_at=entry.started_at,
            state=entry.state,
            stdout=entry.output_text(STREAM_STDOUT),
            stderr=entry.output_text(STREAM_STDERR),
        )

    def wait_for(self, command_id: str, timeout: Optional[float] = None) -> bool:
        """Block until the given process has finished. True if it is no longer running."""
        with self._lock:
            entry = self._running.get(command_id)
        if entry is None:
            return True
        return entry.finished.wait(timeout)

    def shutdown(self, timeout: float = 5.0) -> None:
        """Force-kill every tracked process and forget about them."""
        with self._lock:
            entries = list(self._running.values())
            for entry in entries:
                entry.kill_requested = True
                send_signal(entry.process, force=True)

        if entries:
            logger.process(f"Shutting down {len(entries)} background process(es)")
        for entry in entries:
            if not entry.finished.wait(timeout):
                logger.warning(f"Process '{entry.command_id}' did not exit during shutdown")

        with self._lock:
            for entry in entries:
                if self._running.get(entry.command_id) is entry:
                    del self._running[entry.command_id]

    # Worker threads

    def _read_stream(self, entry: RunningProcess, stream_name: str, pipe) -> None:
        decoder = codecs.getincrementaldecoder('utf-8')(errors='replace')
        try:
            for data in iter(lambda: pipe.read1(READ_CHUNK_SIZE), b''):
                self._emit_chunk(entry, stream_name, decoder.decode(data))
            self._emit_chunk(entry, stream_name, decoder.decode(b'', final=True))
        except (OSError, ValueError) as e:
            # Pipe closed underneath us during shutdown
            logger.debug(f"Reader for '{entry.command_id}' {stream_name} stopped: {e}")
        finally:
            pipe.close()

    def _emit_chunk(self, entry: RunningProcess, stream_name: str, chunk: str) -> None:
        if not chunk:
            return
        entry.buffer(stream_name, chunk)
        self.events.publish(OutputEvent(entry.command_id, stream_name, chunk))

    def _wait(self, entry: RunningProcess) -> None:
        failed = False
        exit_code = None
        try:
            exit_code = entry.process.wait()
            deadline = time.monotonic() + DRAIN_TIMEOUT
            for reader in entry.readers:
                reader.join(max(0.0, deadline - time.monotonic()))
                if reader.is_alive():
                    logger.warning(f"Output of '{entry.command_id}' still open after exit")
        except Exception as e:
            logger.error(f"Lost track of '{entry.command_id}': {e}")
            failed = True
        self._finalize(entry, exit_code, failed)

    def _finalize(self, entry: RunningProcess, exit_code: Optional[int], failed: bool) -> None:
        with self._lock:
            if entry.kill_timer is not None:
                entry.kill_timer.cancel()
            if self._running.get(entry.command_id) is not entry:
                # Already forgotten by shutdown()
                entry.finished.set()
                return
            del self._running[entry.command_id]

            if failed:
                state = ProcessState.FAILED
            elif entry.kill_requested:
                state = ProcessState.KILLED
            else:
                state = ProcessState.COMPLETED
            entry.state = state
            entry.exit_code = exit_code

        logger.process(f"'{entry.command_id}' {state.value} (exit code {exit_code})")
        try:
            self.events.publish(FinishedEvent(entry.command_id, state, exit_code))
        finally:
            entry.finished.set()

    def _force_kill(self, entry: RunningProcess) -> None:
        if entry.finished.is_set():
            return
        logger.warning(
            f"'{entry.command_id}' still running {self.grace_period}s after stop request; killing"
        )
        send_signal(entry.process, force=True)


def create_lifecycle_manager(grace_period: float = DEFAULT_KILL_GRACE_PERIOD,
                             command_timeout: Optional[float] = None) -> ProcessLifecycleManager:
    """Create a lifecycle manager with its own event channel."""
    return ProcessLifecycleManager(grace_period, EventChannel(), create_command_executor(command_timeout))
