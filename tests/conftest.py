import pytest

from cmdpad.commands.lifecycle import ProcessLifecycleManager
from cmdpad.console.sink import ConsoleSink

from tests.helpers import FinishedRecorder


@pytest.fixture
def manager():
    mgr = ProcessLifecycleManager(grace_period=0.5)
    yield mgr
    mgr.shutdown(timeout=5)


@pytest.fixture
def finished(manager):
    recorder = FinishedRecorder(manager)
    yield recorder
    recorder.subscription.unsubscribe()


@pytest.fixture
def console():
    return ConsoleSink()
