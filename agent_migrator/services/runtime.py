"""Injectable runtime collaborators: identifiers, time, latency and randomness.

The orchestrator never calls ``uuid``, ``datetime.now``, ``asyncio.sleep``
or ``random`` directly; it goes through the objects defined here so tests
can run flows deterministically and without wall-clock waits.
"""

import asyncio
import itertools
import random
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional, Protocol


IdGenerator = Callable[[], str]
Clock = Callable[[], datetime]


def uuid_ids() -> str:
    """Generate an opaque unique identifier."""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Scheduler(Protocol):
    """Delay primitive used to simulate step latency and progress ticks."""

    async def sleep(self, seconds: float) -> None:
        ...


class RandomSource(Protocol):
    """Source of floats in [0, 1)."""

    def random(self) -> float:
        ...


class AsyncioScheduler:
    """Real wall-clock delays."""

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class ImmediateScheduler:
    """
    Scheduler that never waits on the wall clock.

    Each ``sleep`` only yields control to the event loop once, so steps and
    their progress tickers still interleave. The requested delays are
    accumulated in ``elapsed`` for assertions.
    """

    def __init__(self):
        self.elapsed = 0.0
        self.calls = 0

    async def sleep(self, seconds: float) -> None:
        self.calls += 1
        self.elapsed += seconds
        await asyncio.sleep(0)


class SequentialIds:
    """Deterministic identifiers: ``prefix-1``, ``prefix-2``, ..."""

    def __init__(self, prefix: str = "id"):
        self.prefix = prefix
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"


class ManualClock:
    """Clock that only moves when told to (or by ``step`` on every read)."""

    def __init__(self, start: Optional[datetime] = None, step: timedelta = timedelta(0)):
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class ScriptedRandom:
    """Replays a fixed sequence of floats, cycling when exhausted."""

    def __init__(self, values: Iterable[float]):
        self.values: List[float] = list(values)
        if not self.values:
            raise ValueError("ScriptedRandom needs at least one value")
        self._cycle = itertools.cycle(self.values)

    def random(self) -> float:
        return next(self._cycle)


def default_random(seed: Optional[int] = None) -> RandomSource:
    """Standard pseudo-random source, optionally seeded."""
    return random.Random(seed)
