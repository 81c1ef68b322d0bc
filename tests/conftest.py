"""Shared fixtures: a fixed clock and predictable ids."""

import itertools
from datetime import datetime

import pytest

from dayboard.adapters import MemoryStore


class FixedClock:
    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current


@pytest.fixture
def now():
    return datetime(2024, 6, 1, 12, 0)


@pytest.fixture
def clock(now):
    return FixedClock(now)


@pytest.fixture
def make_id():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def storage():
    return MemoryStore()
