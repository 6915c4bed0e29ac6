# pocketpet/core/clock.py
import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Saves without an offset are read as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes elapsed from start to end (floored)."""
    return int((end - start).total_seconds() // 60)


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        pass

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        pass


class SystemClock(Clock):
    def now(self) -> datetime:
        return utcnow()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


async def _settle(rounds: int = 5):
    # Let woken tasks run up to their next await before time moves again
    for _ in range(rounds):
        await asyncio.sleep(0)


class ManualClock(Clock):
    """
    Clock that only moves when told to.

    Sleepers are woken by advance() in deadline order, so a headless run
    (tests, the caretaker simulator) replays minutes of timers instantly and
    deterministically.
    """

    def __init__(self, start: Optional[datetime] = None):
        self._now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._sleepers: List[Tuple[datetime, int, asyncio.Future]] = []
        self._seq = itertools.count()

    def now(self) -> datetime:
        return self._now

    async def sleep(self, seconds: float) -> None:
        future = asyncio.get_running_loop().create_future()
        heapq.heappush(self._sleepers, (self._now + timedelta(seconds=seconds), next(self._seq), future))
        await future

    async def advance(self, seconds: float = 0, *, minutes: float = 0) -> None:
        target = self._now + timedelta(seconds=seconds, minutes=minutes)
        await _settle()
        while self._sleepers and self._sleepers[0][0] <= target:
            wake_at, _, future = heapq.heappop(self._sleepers)
            if future.done():  # Sleeper was cancelled
                continue
            self._now = max(self._now, wake_at)
            future.set_result(None)
            await _settle()
        self._now = target
        await _settle()

    def jump(self, seconds: float = 0, *, minutes: float = 0) -> None:
        """Move time forward without waking anyone, as if the process was not running."""
        self._now += timedelta(seconds=seconds, minutes=minutes)

    @property
    def pending_sleepers(self) -> int:
        return sum(1 for _, _, future in self._sleepers if not future.done())
