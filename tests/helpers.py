import os
import threading

import pytest

from cmdpad.commands.models import CommandDomain, CommandSpec, Variable, VariableKind

posix_only = pytest.mark.skipif(os.name == "nt", reason="uses POSIX shell commands")


class FinishedRecorder:
    """Collects finished events and lets a test wait for a given id."""

    def __init__(self, manager):
        self.events = []
        self._lock = threading.Lock()
        self._signals = {}
        self.subscription = manager.events.on_finished(self._record)

    def _signal(self, command_id):
        with self._lock:
            return self._signals.setdefault(command_id, threading.Event())

    def _record(self, event):
        with self._lock:
            self.events.append(event)
        self._signal(event.command_id).set()

    def wait(self, command_id, timeout=10.0):
        return self._signal(command_id).wait(timeout)

    def for_id(self, command_id):
        with self._lock:
            return [e for e in self.events if e.command_id == command_id]


def make_spec(template, command_id="test-cmd", domain=CommandDomain.PROJECT,
              variables=(), requires_confirmation=False, name=None):
    return CommandSpec(
        id=command_id,
        name=name or command_id,
        template=template,
        variables=tuple(variables),
        category="test",
        requires_confirmation=requires_confirmation,
        domain=domain,
    )


def text_var(name):
    return Variable(name=name, label=name.title(), kind=VariableKind.TEXT)
