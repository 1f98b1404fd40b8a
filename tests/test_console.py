import threading
from types import SimpleNamespace

from cmdpad.commands.events import EventChannel, FinishedEvent, OutputEvent, ProcessState
from cmdpad.console.sink import ConsoleKind, ConsoleSink
from cmdpad.constants import STREAM_STDERR, STREAM_STDOUT


def test_entries_keep_append_order(console):
    console.command("$ git status")
    console.info("On branch main")
    console.success("Git Status completed")

    entries = console.snapshot()
    assert [e.kind for e in entries] == [ConsoleKind.COMMAND, ConsoleKind.INFO, ConsoleKind.SUCCESS]
    assert [e.message for e in entries] == ["$ git status", "On branch main", "Git Status completed"]
    assert len(console) == 3


def test_entry_ids_are_unique(console):
    ids = [console.info(str(i)).id for i in range(50)]
    assert len(set(ids)) == 50


def test_subscribers_see_appends_and_clears(console):
    seen = []
    cleared = []
    console.subscribe(seen.append, lambda: cleared.append(True))

    entry = console.warning("careful")
    console.clear()

    assert seen == [entry]
    assert cleared == [True]
    assert console.snapshot() == []


def test_unsubscribe(console):
    seen = []
    subscription = console.subscribe(seen.append)
    console.info("one")
    subscription.unsubscribe()
    console.info("two")
    assert [e.message for e in seen] == ["one"]


def test_listener_may_append(console):
    def echo(entry):
        if entry.kind is ConsoleKind.COMMAND:
            console.info("echoed")

    console.subscribe(echo)
    console.command("$ ls")
    assert [e.message for e in console.snapshot()] == ["$ ls", "echoed"]


def test_max_entries_drops_oldest():
    console = ConsoleSink(max_entries=3)
    for i in range(5):
        console.info(f"line {i}")
    assert [e.message for e in console.snapshot()] == ["line 2", "line 3", "line 4"]


def test_export_text(console):
    entry = console.info("hello")
    expected = f"[{entry.timestamp.strftime('%H:%M:%S')}] hello"
    assert console.export_text() == expected


def test_concurrent_appends_match_observed_order(console):
    seen = []
    console.subscribe(seen.append)

    def worker(n):
        for i in range(100):
            console.info(f"{n}-{i}")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(console) == 400
    assert seen == console.snapshot()
    for n in range(4):
        mine = [e.message for e in seen if e.message.startswith(f"{n}-")]
        assert mine == [f"{n}-{i}" for i in range(100)]


def test_bind_lifecycle_mirrors_events(console):
    manager = SimpleNamespace(events=EventChannel())
    console.bind_lifecycle(manager)

    manager.events.publish(OutputEvent("server", STREAM_STDOUT, "listening\n"))
    manager.events.publish(OutputEvent("server", STREAM_STDERR, "deprecated\n"))
    manager.events.publish(OutputEvent("server", STREAM_STDOUT, "\n"))
    manager.events.publish(FinishedEvent("server", ProcessState.KILLED, -15))
    manager.events.publish(FinishedEvent("build", ProcessState.COMPLETED, 0))
    manager.events.publish(FinishedEvent("test", ProcessState.COMPLETED, 1))
    manager.events.publish(FinishedEvent("lost", ProcessState.FAILED, None))

    entries = [(e.kind, e.message) for e in console.snapshot()]
    assert entries == [
        (ConsoleKind.INFO, "[server] listening"),
        (ConsoleKind.WARNING, "[server] deprecated"),
        (ConsoleKind.SUCCESS, "[server] Stopped"),
        (ConsoleKind.SUCCESS, "[build] Finished"),
        (ConsoleKind.ERROR, "[test] Exited with code 1"),
        (ConsoleKind.ERROR, "[lost] Failed"),
    ]


def test_bind_lifecycle_can_be_undone(console):
    manager = SimpleNamespace(events=EventChannel())
    for subscription in console.bind_lifecycle(manager):
        subscription.unsubscribe()

    manager.events.publish(OutputEvent("server", STREAM_STDOUT, "ignored\n"))
    assert len(console) == 0
    assert manager.events.listener_count() == 0
