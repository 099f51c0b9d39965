from datetime import datetime, timedelta

import pytest

from app.services.message_store import MessageStore
from app.services.presence_sweeper import PresenceSweeper
from app.services.registry import ParticipantRegistry
from app.storage import MessageCollection, ParticipantCollection


class FakeClock:
    """a clock the test moves by hand"""

    def __init__(self, start: datetime = datetime(2024, 5, 1, 12, 0, 0)) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class Room:
    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.participants = ParticipantCollection()
        self.messages = MessageCollection()
        self.store = MessageStore(self.messages, self.participants, clock=clock)
        self.registry = ParticipantRegistry(self.participants, self.store, clock=clock)
        self.sweeper = PresenceSweeper(
            self.registry,
            self.store,
            absence_timeout_secs=10.0,
            interval_secs=15.0,
            clock=clock,
        )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def room(clock):
    return Room(clock)
