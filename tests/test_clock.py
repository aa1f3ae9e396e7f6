import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from auction_site.core.clock import ManualClock, OneShotAlarm, SystemClock, SystemClockFactory, as_utc


def test_manual_clock_is_in_site_timezone():
    clock = ManualClock(timezone=-5, start=datetime(2024, 6, 1, 8, 0))

    assert clock.timezone == -5
    assert clock.now().utcoffset() == timedelta(hours=-5)
    assert as_utc(clock.now()) == datetime(2024, 6, 1, 13, 0, tzinfo=timezone.utc)


def test_localize_naive_and_aware():
    clock = ManualClock(timezone=2)

    naive = clock.localize(datetime(2024, 6, 1, 12, 0))
    aware = clock.localize(datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc))

    assert naive.utcoffset() == timedelta(hours=2)
    assert aware == datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    assert aware.hour == 14


def test_time_only_moves_forward():
    clock = ManualClock()
    start = clock.now()

    assert clock.advance(minutes=5) == start + timedelta(minutes=5)
    with pytest.raises(ValueError):
        clock.advance(seconds=-1)
    with pytest.raises(ValueError):
        clock.set(start)


def test_due_alarms_ring_in_order():
    clock = ManualClock()
    rang = []
    for name, delay in (("late", 3000), ("early", 1000), ("never", 10_000)):
        clock.instantiate_alarm(delay).on_ring(lambda name=name: rang.append(name))

    clock.advance(seconds=5)

    assert rang == ["early", "late"]
    assert clock.pending_alarms == 1


def test_alarm_rings_once():
    clock = ManualClock()
    alarm = clock.instantiate_alarm(0)
    calls = []
    alarm.on_ring(lambda: calls.append(clock.now()))

    clock.advance(seconds=1)
    clock.advance(seconds=1)
    alarm.ring()

    assert alarm.rung
    assert len(calls) == 1


def test_cancelled_alarm_stays_silent():
    clock = ManualClock()
    alarm = clock.instantiate_alarm(1000)
    alarm.on_ring(pytest.fail)

    alarm.cancel()
    clock.advance(seconds=2)

    assert alarm.cancelled
    assert not alarm.rung
    assert clock.pending_alarms == 0


def test_negative_delay_is_rejected():
    with pytest.raises(ValueError):
        ManualClock().instantiate_alarm(-1)


def test_factory_builds_clocks_per_timezone():
    clock = SystemClockFactory().instantiate_clock(3)

    assert isinstance(clock, SystemClock)
    assert clock.now().utcoffset() == timedelta(hours=3)


@pytest.mark.asyncio
async def test_system_alarm_rings_on_the_event_loop():
    rang = asyncio.Event()
    alarm = SystemClock(0).instantiate_alarm(10)
    alarm.on_ring(rang.set)

    await asyncio.wait_for(rang.wait(), timeout=2)

    assert isinstance(alarm, OneShotAlarm)
    assert alarm.rung
