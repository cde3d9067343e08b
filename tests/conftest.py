"""Shared pytest fixtures."""

import pytest

from velocitygate.lib.sliding_window import VelocityWindowStore
from velocitygate.lib.threat import ThreatAnalyzer


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return VelocityWindowStore(clock=clock)


@pytest.fixture
def analyzer(store):
    return ThreatAnalyzer(store)


@pytest.fixture
def browser_ua():
    return "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0 Safari/537.36"
