import functools
import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, TypeVar

from sqlalchemy import DateTime, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import (
    DBAPIError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import TypeDecorator

from auction_site.core.clock import as_utc
from auction_site.core.config import settings
from auction_site.core.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Base(DeclarativeBase):
    """All ORM models base class"""

    pass


class UTCDateTime(TypeDecorator):
    """Timestamp stored as UTC and always read back timezone-aware.

    SQLite keeps no offset, so every value is normalised before it is bound;
    comparisons in SQL then line up across sites in different timezones.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        return as_utc(value)

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        return as_utc(value)


def _engine_options(url: str) -> dict[str, Any]:
    backend = make_url(url).get_backend_name()
    if backend == "sqlite":
        # One shared connection keeps an in-memory database alive across sessions
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_pre_ping": True,
        "pool_use_lifo": True,
        "connect_args": {
            "server_settings": {
                "timezone": "UTC",
                "application_name": "auction_site",
            },
            "command_timeout": 30,
            "timeout": 15,
        },
    }


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Entity store manager: owns the async engine and the session factory"""

    def __init__(self, url: str | None = None, echo: bool = False) -> None:
        self.url = url or settings.DATABASE_URL
        self.echo = echo
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    async def connect(self) -> None:
        """Create the engine and session factory (idempotent)"""
        if self._engine is None:
            self._engine = create_async_engine(
                self.url, echo=self.echo, **_engine_options(self.url)
            )
            if self._engine.dialect.name == "sqlite":
                event.listen(
                    self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys
                )
            self._session_factory = async_sessionmaker(
                self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )

    async def disconnect(self) -> None:
        """Dispose the engine and its pooled connections"""
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._session_factory = None

    def get_engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not connected. Call connect() first.")
        return self._engine

    def session(self) -> AsyncSession:
        """Open a new AsyncSession bound to this database"""
        if self._session_factory is None:
            raise RuntimeError("Database is not connected. Call connect() first.")
        return self._session_factory()

    async def ping(self) -> bool:
        """Test the store connection"""
        try:
            async with self.get_engine().connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError):
            return False

    async def check(self) -> None:
        """Raise StoreUnavailableError unless the store answers"""
        if not await self.ping():
            raise StoreUnavailableError(f"cannot reach entity store at {self.url!r}")

    async def create_all(self) -> None:
        """Initialize database, create all tables"""
        async with self.get_engine().begin() as conn:
            # Import all models to ensure they are registered
            from auction_site.models import (  # noqa: F401
                Auction,
                Site,
                User,
                UserSession,
            )

            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.get_engine().begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)


database = Database()


def _is_unavailable(exc: BaseException) -> bool:
    if isinstance(exc, (OperationalError, InterfaceError, PoolTimeoutError, OSError)):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


async def _rollback_quietly(db: AsyncSession) -> None:
    try:
        await db.rollback()
    except (SQLAlchemyError, OSError):
        logger.warning("Rollback failed after store error", exc_info=True)


def store_operation(
    func: Callable[..., Awaitable[T]],
) -> Callable[..., Awaitable[T]]:
    """Wrap a service taking ``db`` first: roll back on failure and surface
    connectivity problems as StoreUnavailableError (never retried here)."""

    @functools.wraps(func)
    async def wrapper(db: AsyncSession, *args: Any, **kwargs: Any) -> T:
        try:
            return await func(db, *args, **kwargs)
        except Exception as exc:
            await _rollback_quietly(db)
            if _is_unavailable(exc):
                logger.error("Entity store unavailable during %s: %s", func.__name__, exc)
                raise StoreUnavailableError(str(exc)) from exc
            raise

    return wrapper
