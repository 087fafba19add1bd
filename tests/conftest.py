"""Shared fixtures: a hand-driven clock and generators bound to it."""

from collections import deque

import pytest

from snowfactory.ids import IdGenerator


class FakeClock:
    """A wall clock that only moves when told to.

    Queued ``readings`` are returned first, then ``millis`` forever. Sleeping
    moves ``millis`` forward by the slept time unless ``recovers`` is off.
    """

    def __init__(self, millis=1000, recovers=True):
        self.millis = millis
        self.recovers = recovers
        self.readings = deque()
        self.slept = []

    def __call__(self):
        if self.readings:
            return self.readings.popleft()
        return self.millis

    def sleep(self, seconds, cancel=None):
        self.slept.append(seconds)
        if cancel is not None and cancel.is_set():
            return True
        if self.recovers:
            self.millis += round(seconds * 1000)
        return False


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_generator(clock):
    """Builds generators on the fake clock with a zero epoch."""

    def _make(worker_id=7, **kwargs):
        kwargs.setdefault("epoch", 0)
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("sleeper", clock.sleep)
        return IdGenerator(worker_id, **kwargs)

    return _make
