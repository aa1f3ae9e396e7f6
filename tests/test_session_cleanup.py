from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select

from auction_site.core.errors import StoreUnavailableError
from auction_site.models import UserSession
from auction_site.services import site_service
from auction_site.tasks import SessionSweeper, session_cleanup, start_session_sweeper
from tests.conftest import SESSION_LIFETIME, SITE_NAME, SITE_TIMEZONE

pytestmark = pytest.mark.asyncio


class FixedClockFactory:
    def __init__(self, clock):
        self.clock = clock
        self.requested = []

    def instantiate_clock(self, timezone):
        self.requested.append(timezone)
        return self.clock


async def count_sessions(database):
    async with database.session() as db:
        result = await db.execute(select(func.count()).select_from(UserSession))
        return result.scalar_one()


async def test_alarm_driven_sweep(database, sessions, clock):
    sweeper = SessionSweeper(database, SITE_NAME, clock, interval_seconds=SESSION_LIFETIME // 2)
    sweeper.start()

    clock.advance(seconds=SESSION_LIFETIME // 2)
    await sweeper.wait_idle()
    assert await count_sessions(database) == 3

    clock.advance(seconds=SESSION_LIFETIME // 2)
    await sweeper.wait_idle()
    assert await count_sessions(database) == 0

    sweeper.stop()
    assert clock.pending_alarms == 0


async def test_sweep_once_reports_purged(database, sessions, clock):
    sweeper = SessionSweeper(database, SITE_NAME, clock)

    clock.advance(seconds=SESSION_LIFETIME)

    assert await sweeper.sweep_once() == 3
    assert await sweeper.sweep_once() == 0


async def test_start_uses_site_timezone(database, site, clock):
    factory = FixedClockFactory(clock)

    sweeper = await start_session_sweeper(database, SITE_NAME, factory, interval_seconds=60)

    assert factory.requested == [SITE_TIMEZONE]
    assert sweeper.running
    assert clock.pending_alarms == 1
    sweeper.stop()
    assert not sweeper.running


async def test_stops_when_site_is_deleted(database, db, site, clock):
    sweeper = SessionSweeper(database, SITE_NAME, clock, interval_seconds=60)
    sweeper.start()
    await site_service.delete_site(db, SITE_NAME)

    assert await sweeper.sweep_once() == 0
    assert not sweeper.running
    assert clock.pending_alarms == 0


async def test_store_outage_keeps_sweeping(database, site, clock, monkeypatch):
    monkeypatch.setattr(
        session_cleanup,
        "purge_expired_sessions",
        AsyncMock(side_effect=StoreUnavailableError("connection refused")),
    )
    sweeper = SessionSweeper(database, SITE_NAME, clock, interval_seconds=60)
    sweeper.start()

    assert await sweeper.sweep_once() == 0
    assert sweeper.running
    sweeper.stop()
