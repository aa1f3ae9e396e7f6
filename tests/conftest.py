"""
Shared fixtures: an in-memory SQLite store, a hand-driven clock and a site
populated with a seller and two bidders.
"""

from datetime import datetime, timedelta

import pytest
import pytest_asyncio

from auction_site.core.clock import ManualClock
from auction_site.core.database import Database
from auction_site.services import auction_service, session_service, site_service

SITE_NAME = "vintage-cameras"
SITE_TIMEZONE = 1
SESSION_LIFETIME = 600
INCREMENT = 10.0
PASSWORD = "secret-pw"


@pytest_asyncio.fixture
async def database():
    """Fresh in-memory store per test"""
    store = Database(url="sqlite+aiosqlite://")
    await store.connect()
    await store.create_all()
    yield store
    await store.disconnect()


@pytest_asyncio.fixture
async def db(database):
    async with database.session() as session:
        yield session


@pytest.fixture
def clock():
    return ManualClock(timezone=SITE_TIMEZONE, start=datetime(2024, 3, 1, 10, 0, 0))


@pytest_asyncio.fixture
async def site(db):
    return await site_service.create_site(
        db, SITE_NAME, SITE_TIMEZONE, SESSION_LIFETIME, INCREMENT
    )


@pytest_asyncio.fixture
async def users(db, site):
    """alice sells, bob and carol bid"""
    return {
        name: await site_service.create_user(db, SITE_NAME, name, PASSWORD)
        for name in ("alice", "bob", "carol")
    }


@pytest_asyncio.fixture
async def sessions(db, users, clock):
    return {
        name: await session_service.login(db, SITE_NAME, name, PASSWORD, clock)
        for name in users
    }


@pytest_asyncio.fixture
async def auction(db, sessions, clock):
    """Open for one day, starting at 100"""
    return await auction_service.create_auction(
        db,
        sessions["alice"].id,
        "Leica M3 with 50mm Summicron",
        clock.now() + timedelta(days=1),
        100.0,
        clock,
    )
