"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta

import pytest

from pix_keys.models.base import Event
from pix_keys.models.pix_key import PixKeyCandidate
from pix_keys.rules.engine import PixKeyEngine
from pix_keys.store.memory import InMemoryRecordIndex


class FakeClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        now = self.current
        self.current += timedelta(seconds=1)
        return now


class RecordingSink:
    """Event sink that keeps published events in memory."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    def publish(self, event: Event) -> None:
        self.events.append(event)


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 9, 0, 0))


@pytest.fixture
def index() -> InMemoryRecordIndex:
    """Create a fresh index for each test."""
    return InMemoryRecordIndex()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def engine(index: InMemoryRecordIndex, clock: FakeClock, sink: RecordingSink) -> PixKeyEngine:
    return PixKeyEngine(index, event_sink=sink, clock=clock)


@pytest.fixture
def phone_candidate() -> PixKeyCandidate:
    """Candidate used in the end-to-end example."""
    return PixKeyCandidate(
        key_type="celular",
        key_value="+5511987654321",
        person_type="fisica",
        account_type="corrente",
        branch_number=1234,
        account_number=56789012,
        holder_first_name="Ana",
    )
