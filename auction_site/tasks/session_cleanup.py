# auction_site/tasks/session_cleanup.py
"""Background housekeeping: drop expired sessions of a site.

Expired sessions are already inert (every operation re-checks the expiry), so
this only keeps the sessions table small. The sweep is driven by one-shot
alarms on the site clock, re-armed after each ring, so a ``ManualClock``
triggers it without any real waiting.
"""

import asyncio
import logging

from auction_site.core.clock import Alarm, Clock, ClockFactory
from auction_site.core.config import settings
from auction_site.core.database import Database
from auction_site.core.errors import NotFoundError, StoreUnavailableError
from auction_site.services.session_service import purge_expired_sessions
from auction_site.services.site_service import load_site

logger = logging.getLogger(__name__)


class SessionSweeper:
    """Purges a site's expired sessions every ``interval_seconds`` of site time"""

    def __init__(
        self,
        database: Database,
        site_name: str,
        clock: Clock,
        interval_seconds: int | None = None,
    ) -> None:
        self.database = database
        self.site_name = site_name
        self.clock = clock
        self.interval_seconds = (
            interval_seconds
            if interval_seconds is not None
            else settings.SESSION_SWEEP_INTERVAL_SECONDS
        )
        self._alarm: Alarm | None = None
        self._tasks: set[asyncio.Task] = set()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._arm()
        logger.info(
            "Session sweeper started for site %r (every %ss)",
            self.site_name,
            self.interval_seconds,
        )

    def stop(self) -> None:
        self._running = False
        if self._alarm is not None:
            self._alarm.cancel()
            self._alarm = None

    def _arm(self) -> None:
        self._alarm = self.clock.instantiate_alarm(self.interval_seconds * 1000)
        self._alarm.on_ring(self._on_ring)

    def _on_ring(self) -> None:
        if not self._running:
            return
        task = asyncio.get_running_loop().create_task(self.sweep_once())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self._arm()

    async def sweep_once(self) -> int:
        """Run one sweep now, returning the number of purged sessions"""
        try:
            async with self.database.session() as db:
                return await purge_expired_sessions(db, self.site_name, self.clock)
        except NotFoundError:
            logger.info("Site %r is gone, stopping its session sweeper", self.site_name)
            self.stop()
        except StoreUnavailableError as e:
            logger.error("Session sweep for site %r failed: %s", self.site_name, e)
        return 0

    async def wait_idle(self) -> None:
        """Wait for sweeps triggered by alarms that already rang"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))


async def start_session_sweeper(
    database: Database,
    site_name: str,
    clock_factory: ClockFactory,
    interval_seconds: int | None = None,
) -> SessionSweeper:
    """Load a site, give it a clock in its timezone and start sweeping"""
    async with database.session() as db:
        site = await load_site(db, site_name)

    clock = clock_factory.instantiate_clock(site.timezone)
    sweeper = SessionSweeper(database, site.name, clock, interval_seconds)
    sweeper.start()
    return sweeper
