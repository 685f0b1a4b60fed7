import pytest

from punchcard.storage import InMemoryStorage
from punchcard.store import LedgerStore

from .fakes import FixedClock, RecordingScheduler


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def store(storage, clock):
    return LedgerStore(storage, clock=clock)


@pytest.fixture
def scheduler():
    return RecordingScheduler()
