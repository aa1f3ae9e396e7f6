# Core modules
from auction_site.core.clock import (
    Alarm,
    Clock,
    ClockFactory,
    ManualClock,
    SystemClock,
    SystemClockFactory,
)
from auction_site.core.config import settings
from auction_site.core.database import Base, Database, database
from auction_site.core.locks import KeyedLock, auction_locks, session_locks

__all__ = [
    "settings",
    "Base",
    "Database",
    "database",
    "Alarm",
    "Clock",
    "ClockFactory",
    "ManualClock",
    "SystemClock",
    "SystemClockFactory",
    "KeyedLock",
    "auction_locks",
    "session_locks",
]
