"""Clock and alarm contract consumed by the auction site services.

Every "now" used by the services comes from an injected ``Clock`` bound to a
site's timezone. Expiry is never detected by sleeping: sessions and auctions
are compared against ``clock.now()`` at the moment they are used, so a test can
move a ``ManualClock`` forward and observe the effect immediately.
"""

import asyncio
import heapq
import itertools
from datetime import datetime, timedelta, timezone
from typing import Callable, Protocol


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are taken as UTC)"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def site_tzinfo(offset_hours: int) -> timezone:
    return timezone(timedelta(hours=offset_hours))


class Alarm(Protocol):
    """One-shot alarm: rings at most once, then stays silent"""

    @property
    def rung(self) -> bool: ...

    def on_ring(self, callback: Callable[[], None]) -> None: ...

    def cancel(self) -> None: ...


class Clock(Protocol):
    """Monotonic, timezone-aware source of the current site time"""

    @property
    def timezone(self) -> int: ...

    def now(self) -> datetime: ...

    def localize(self, value: datetime) -> datetime: ...

    def instantiate_alarm(self, delay_ms: int) -> Alarm: ...


class ClockFactory(Protocol):
    def instantiate_clock(self, timezone: int) -> Clock: ...


class OneShotAlarm:
    """Alarm whose callbacks run once when ``ring`` is first called"""

    def __init__(self) -> None:
        self._callbacks: list[Callable[[], None]] = []
        self._rung = False
        self._cancelled = False
        self._handle: asyncio.TimerHandle | None = None

    @property
    def rung(self) -> bool:
        return self._rung

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def on_ring(self, callback: Callable[[], None]) -> None:
        self._callbacks.append(callback)

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def ring(self) -> None:
        if self._rung or self._cancelled:
            return
        self._rung = True
        self._handle = None
        for callback in list(self._callbacks):
            callback()


class _ClockBase:
    def __init__(self, timezone: int) -> None:
        self._timezone = timezone
        self._tzinfo = site_tzinfo(timezone)

    @property
    def timezone(self) -> int:
        return self._timezone

    def localize(self, value: datetime) -> datetime:
        """Attach the site offset to a naive datetime, convert an aware one"""
        if value.tzinfo is None:
            return value.replace(tzinfo=self._tzinfo)
        return value.astimezone(self._tzinfo)


class SystemClock(_ClockBase):
    """Wall clock in the site's timezone; alarms run on the asyncio loop"""

    def now(self) -> datetime:
        return datetime.now(self._tzinfo)

    def instantiate_alarm(self, delay_ms: int) -> OneShotAlarm:
        if delay_ms < 0:
            raise ValueError("delay_ms must be non-negative")
        alarm = OneShotAlarm()
        loop = asyncio.get_running_loop()
        alarm._handle = loop.call_later(delay_ms / 1000, alarm.ring)
        return alarm


class ManualClock(_ClockBase):
    """Deterministic clock for tests and simulations.

    Time only moves when ``advance`` or ``set`` is called; alarms that become
    due ring synchronously, earliest first.
    """

    def __init__(self, timezone: int = 0, start: datetime | None = None) -> None:
        super().__init__(timezone)
        if start is None:
            start = datetime(2024, 1, 1, 12, 0, 0)
        self._now = self.localize(start)
        self._alarms: list[tuple[datetime, int, OneShotAlarm]] = []
        self._sequence = itertools.count()

    def now(self) -> datetime:
        return self._now

    def instantiate_alarm(self, delay_ms: int) -> OneShotAlarm:
        if delay_ms < 0:
            raise ValueError("delay_ms must be non-negative")
        alarm = OneShotAlarm()
        due = self._now + timedelta(milliseconds=delay_ms)
        heapq.heappush(self._alarms, (due, next(self._sequence), alarm))
        return alarm

    def advance(self, **delta: float) -> datetime:
        """Move time forward by ``timedelta(**delta)`` and return the new now"""
        step = timedelta(**delta)
        if step < timedelta(0):
            raise ValueError("a clock cannot move backwards")
        return self.set(self._now + step)

    def set(self, when: datetime) -> datetime:
        when = self.localize(when)
        if when < self._now:
            raise ValueError("a clock cannot move backwards")
        while self._alarms and self._alarms[0][0] <= when:
            due, _, alarm = heapq.heappop(self._alarms)
            self._now = max(self._now, due)
            alarm.ring()
        self._now = when
        return self._now

    @property
    def pending_alarms(self) -> int:
        return sum(1 for _, _, alarm in self._alarms if not alarm.cancelled)


class SystemClockFactory:
    def instantiate_clock(self, timezone: int) -> SystemClock:
        return SystemClock(timezone)
