import threading
import time

import pytest

from cmdpad.commands import lifecycle
from cmdpad.commands.errors import AlreadyRunningError, NotFoundError, SpawnError
from cmdpad.commands.events import FinishedEvent, OutputEvent, ProcessState
from cmdpad.commands.executor import create_command_executor
from cmdpad.constants import STREAM_STDERR, STREAM_STDOUT, TIMEOUT_EXIT_CODE

from tests.helpers import posix_only

pytestmark = posix_only

TICKER = "while true; do echo tick; sleep 0.05; done"


def wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


def test_execute_sync_captures_output(manager):
    result = manager.execute_sync("echo hello")
    assert result.exit_code == 0
    assert result.stdout == "hello"
    assert result.success is True
    assert manager.running_ids() == []


def test_execute_sync_reports_non_zero_exit(manager):
    result = manager.execute_sync("echo oops >&2; exit 3")
    assert result.exit_code == 3
    assert result.stderr == "oops"
    assert result.success is False
    assert result.error is None


def test_execute_sync_spawn_failure(manager, tmp_path):
    result = manager.execute_sync("echo hi", cwd=tmp_path / "missing", command_id="hi")
    assert result.exit_code is None
    assert isinstance(result.error, SpawnError)
    assert result.error.command_id == "hi"
    assert result.success is False


def test_execute_sync_timeout(manager):
    started = time.monotonic()
    result = manager.execute_sync("sleep 5", timeout=0.3)
    assert time.monotonic() - started < 4
    assert result.exit_code == TIMEOUT_EXIT_CODE
    assert "timed out" in result.error_message


def test_execute_sync_replaces_undecodable_output(manager):
    result = manager.execute_sync("printf 'ok\\377\\n'; printf '\\377' >&2")
    assert result.exit_code == 0
    assert result.stdout == "ok\ufffd"
    assert result.stderr == "\ufffd"


def test_zero_timeout_overrides_default_timeout():
    executor = create_command_executor(0.2)
    result = executor.execute("sleep 0.5; echo done", timeout=0)
    assert result.exit_code == 0
    assert result.stdout == "done"


def test_execute_sync_runs_in_cwd(manager, tmp_path):
    result = manager.execute_sync("pwd", cwd=tmp_path)
    assert result.stdout.endswith(tmp_path.name)


def test_background_process_is_tracked(manager, finished):
    launch = manager.execute_background("ticker", TICKER)
    assert launch.success
    assert manager.is_running("ticker")
    info = manager.get("ticker")
    assert info.command == TICKER
    assert info.state is ProcessState.RUNNING
    assert info.pid > 0

    manager.kill("ticker")
    assert finished.wait("ticker")
    assert not manager.is_running("ticker")
    assert manager.get("ticker") is None


def test_second_start_is_rejected_without_spawning(manager, monkeypatch):
    calls = []
    real_spawn = lifecycle.spawn_process

    def counting_spawn(*args, **kwargs):
        calls.append(args)
        return real_spawn(*args, **kwargs)

    monkeypatch.setattr(lifecycle, "spawn_process", counting_spawn)

    assert manager.execute_background("server", TICKER).success
    second = manager.execute_background("server", TICKER)
    assert second.success is False
    assert isinstance(second.error, AlreadyRunningError)
    assert len(calls) == 1


def test_background_spawn_failure_leaves_nothing_tracked(manager, tmp_path):
    launch = manager.execute_background("bad", "echo hi", cwd=tmp_path / "missing")
    assert launch.success is False
    assert isinstance(launch.error, SpawnError)
    assert manager.running_ids() == []


def test_kill_unknown_id_leaves_running_set_alone(manager):
    assert manager.execute_background("ticker", TICKER).success
    before = manager.running_ids()

    outcome = manager.kill("nothing")
    assert outcome.success is False
    assert isinstance(outcome.error, NotFoundError)
    assert manager.running_ids() == before == ["ticker"]
    assert manager.is_running("ticker")
    assert not manager.is_running("nothing")


def test_kill_targets_only_one_process(manager, finished):
    counts = {"a": 0, "b": 0, "c": 0}
    lock = threading.Lock()

    def count(event):
        with lock:
            counts[event.command_id] += 1

    manager.events.on_output(count)
    for command_id in counts:
        assert manager.execute_background(command_id, TICKER).success

    assert wait_until(lambda: all(counts.values()))
    manager.kill("b")
    assert finished.wait("b")
    assert finished.for_id("b")[0].state is ProcessState.KILLED

    with lock:
        before = dict(counts)
    assert wait_until(lambda: counts["a"] > before["a"] and counts["c"] > before["c"])
    assert sorted(manager.running_ids()) == ["a", "c"]
    assert finished.for_id("a") == []
    assert finished.for_id("c") == []


def test_natural_exit_emits_exactly_one_finished_event(manager, finished):
    order = []
    manager.events.on_output(lambda e: order.append(("output", e.chunk)), command_id="short")
    manager.events.on_finished(lambda e: order.append(("finished", e.exit_code)), command_id="short")

    assert manager.execute_background("short", "echo one; echo two; exit 2").success
    assert finished.wait("short")
    time.sleep(0.2)

    events = finished.for_id("short")
    assert events == [FinishedEvent("short", ProcessState.COMPLETED, 2)]
    assert order[-1] == ("finished", 2)
    output = "".join(chunk for kind, chunk in order if kind == "output")
    assert output == "one\ntwo\n"
    assert not manager.is_running("short")


def test_kill_racing_natural_exit_emits_one_event(manager, finished):
    assert manager.execute_background("racer", "sleep 0.1").success
    time.sleep(0.1)
    manager.kill("racer")
    assert finished.wait("racer")
    time.sleep(0.3)

    events = finished.for_id("racer")
    assert len(events) == 1
    assert events[0].state in (ProcessState.COMPLETED, ProcessState.KILLED)


def test_kill_after_exit_reports_completed(manager, finished):
    assert manager.execute_background("quick", "exit 0").success
    assert finished.wait("quick")
    assert manager.kill("quick").success is False
    assert finished.for_id("quick")[0].state is ProcessState.COMPLETED


def test_kill_escalates_when_sigterm_is_ignored(manager, finished):
    ready = threading.Event()
    manager.events.on_output(lambda e: ready.set(), command_id="stubborn")

    command = "trap '' TERM; echo ready; while true; do sleep 0.1; done"
    assert manager.execute_background("stubborn", command).success
    assert ready.wait(5)

    started = time.monotonic()
    assert manager.kill("stubborn").success
    assert finished.wait("stubborn", timeout=10)
    assert time.monotonic() - started >= manager.grace_period * 0.8
    assert finished.for_id("stubborn")[0].state is ProcessState.KILLED


def test_restart_allowed_after_finish(manager, finished):
    assert manager.execute_background("again", "exit 0").success
    assert finished.wait("again")
    assert manager.execute_background("again", TICKER).success
    assert manager.is_running("again")


def test_streams_are_delivered_in_order(manager, finished):
    chunks = {STREAM_STDOUT: [], STREAM_STDERR: []}
    manager.events.on_output(lambda e: chunks[e.stream].append(e.chunk), command_id="streams")

    command = "for i in 1 2 3 4 5; do echo out$i; echo err$i >&2; done"
    assert manager.execute_background("streams", command).success
    assert finished.wait("streams")

    assert "".join(chunks[STREAM_STDOUT]) == "".join(f"out{i}\n" for i in range(1, 6))
    assert "".join(chunks[STREAM_STDERR]) == "".join(f"err{i}\n" for i in range(1, 6))


def test_stream_filter(manager, finished):
    received = []
    manager.events.on_output(received.append, command_id="filtered", stream=STREAM_STDERR)

    assert manager.execute_background("filtered", "echo visible >&2; echo hidden").success
    assert finished.wait("filtered")

    assert all(isinstance(e, OutputEvent) and e.stream == STREAM_STDERR for e in received)
    assert "".join(e.chunk for e in received) == "visible\n"


def test_unsubscribe_stops_delivery(manager, finished):
    received = []
    subscription = manager.events.on_output(received.append, command_id="ticker")
    assert manager.execute_background("ticker", TICKER).success
    assert wait_until(lambda: received)

    subscription.unsubscribe()
    time.sleep(0.05)
    count = len(received)
    time.sleep(0.3)
    assert len(received) == count
    assert subscription.active is False


def test_failing_handler_does_not_affect_others(manager, finished):
    received = []

    def broken(event):
        raise RuntimeError("handler bug")

    manager.events.on_output(broken)
    manager.events.on_output(received.append)

    assert manager.execute_background("echo", "echo hi").success
    assert finished.wait("echo")
    assert "".join(e.chunk for e in received) == "hi\n"
    assert finished.for_id("echo")[0].state is ProcessState.COMPLETED


def test_wait_for_unknown_id_returns_immediately(manager):
    assert manager.wait_for("nothing", timeout=0.1) is True


def test_output_is_buffered_for_snapshots(manager):
    assert manager.execute_background("buffered", "echo first; sleep 5").success
    assert wait_until(lambda: manager.get("buffered").stdout == "first\n")


def test_shutdown_kills_everything(manager, finished):
    for command_id in ("one", "two"):
        assert manager.execute_background(command_id, TICKER).success

    manager.shutdown(timeout=5)
    assert manager.running_ids() == []
    for command_id in ("one", "two"):
        events = finished.for_id(command_id)
        assert [e.state for e in events] == [ProcessState.KILLED]


def test_drain_wait_is_shared_between_streams(manager, finished, monkeypatch):
    monkeypatch.setattr(lifecycle, "DRAIN_TIMEOUT", 1.0)

    # The backgrounded sleep inherits both pipes and outlives the shell
    started = time.monotonic()
    assert manager.execute_background("orphan", "sleep 3 & exit 0").success
    assert finished.wait("orphan", timeout=10)

    assert time.monotonic() - started < 1.8
    assert finished.for_id("orphan")[0].state is ProcessState.COMPLETED
