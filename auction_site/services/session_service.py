"""Login sessions with sliding expiration.

A session is live while ``clock.now() < valid_until``. Liveness is checked
each time a session is used, never cached: a session obtained a moment ago may
already have expired.
"""

import logging
from datetime import timedelta
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from auction_site.core.clock import Clock
from auction_site.core.database import store_operation
from auction_site.core.errors import InvalidStateError, SessionExpiredError
from auction_site.core.locks import session_locks
from auction_site.core.security import verify_password
from auction_site.models import Site, User, UserSession
from auction_site.schemas import SessionInfo, UserCredentials, UserInfo, parse_input
from auction_site.services.site_service import get_site_or_raise

logger = logging.getLogger(__name__)


def _expiry_for(site: Site, clock: Clock):
    return clock.now() + timedelta(seconds=site.session_expiration_seconds)


def _session_info(session: UserSession, user: User) -> SessionInfo:
    return SessionInfo(
        id=session.id,
        valid_until=session.valid_until,
        user=UserInfo.model_validate(user),
    )


@store_operation
async def login(
    db: AsyncSession,
    site_name: str,
    username: str,
    password: str,
    clock: Clock,
) -> SessionInfo | None:
    """
    Log a user into a site.

    Returns None on unknown username or wrong password. A live session of the
    same user is reused with its expiry reset to ``now + lifetime``; an expired
    one is replaced by a fresh session with a new id.
    """
    credentials = parse_input(UserCredentials, username=username, password=password)
    site = await get_site_or_raise(db, site_name)

    result = await db.execute(
        select(User).where(
            User.site_id == site.id, User.username == credentials.username
        )
    )
    user = result.scalar_one_or_none()
    if user is None or not verify_password(credentials.password, user.password_hash):
        logger.info("Failed login for %r on site %r", credentials.username, site.name)
        return None

    async with session_locks.hold(user.id):
        result = await db.execute(
            select(UserSession)
            .where(UserSession.user_id == user.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        session = result.scalar_one_or_none()
        now = clock.now()

        if session is not None and session.is_live(now):
            session.valid_until = _expiry_for(site, clock)
        else:
            if session is not None:
                await db.delete(session)
                await db.flush()
            session = UserSession(
                user_id=user.id,
                site_id=site.id,
                valid_until=_expiry_for(site, clock),
            )
            db.add(session)

        await db.commit()

    logger.info("User %r logged into site %r", user.username, site.name)
    return _session_info(session, user)


@store_operation
async def logout(db: AsyncSession, session_id: UUID) -> None:
    """Close a session; closing it a second time raises InvalidStateError"""
    result = await db.execute(delete(UserSession).where(UserSession.id == session_id))
    if result.rowcount == 0:
        raise InvalidStateError(f"Session {session_id} does not exist")
    await db.commit()
    logger.info("Session %s logged out", session_id)


@store_operation
async def get_session(
    db: AsyncSession, session_id: UUID, clock: Clock
) -> SessionInfo | None:
    """Return the session if it exists and is still live"""
    result = await db.execute(
        select(UserSession, User)
        .join(User, UserSession.user_id == User.id)
        .where(UserSession.id == session_id)
        .execution_options(populate_existing=True)
    )
    row = result.first()
    if row is None:
        return None
    session, user = row
    if not session.is_live(clock.now()):
        return None
    return _session_info(session, user)


async def require_live_session(
    db: AsyncSession, session_id: UUID | None, clock: Clock
) -> tuple[UserSession, User]:
    """Load a session and its user, raising SessionExpiredError unless live now"""
    if session_id is None:
        raise SessionExpiredError("No session supplied")
    result = await db.execute(
        select(UserSession, User)
        .join(User, UserSession.user_id == User.id)
        .where(UserSession.id == session_id)
        .execution_options(populate_existing=True)
    )
    row = result.first()
    if row is None:
        raise SessionExpiredError(f"Session {session_id} does not exist")
    session, user = row
    if not session.is_live(clock.now()):
        raise SessionExpiredError(f"Session {session_id} expired")
    return session, user


async def refresh_session(
    db: AsyncSession, session: UserSession, site: Site, clock: Clock
) -> None:
    """Slide the expiry to ``now + site lifetime`` (caller commits).

    Serialized with ``login`` on the owner's user id, the key every writer of
    a session row takes.
    """
    session_id = session.id
    async with session_locks.hold(session.user_id):
        result = await db.execute(
            select(UserSession)
            .where(UserSession.id == session_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        current = result.scalar_one_or_none()
        if current is None:
            raise SessionExpiredError(f"Session {session_id} does not exist")
        current.valid_until = _expiry_for(site, clock)
        await db.flush()


@store_operation
async def purge_expired_sessions(db: AsyncSession, site_name: str, clock: Clock) -> int:
    """Delete the site's sessions that are no longer live, returning how many"""
    site = await get_site_or_raise(db, site_name)
    result = await db.execute(
        delete(UserSession).where(
            UserSession.site_id == site.id,
            UserSession.valid_until <= clock.now(),
        )
    )
    await db.commit()
    if result.rowcount:
        logger.info("Purged %d expired sessions of site %r", result.rowcount, site.name)
    return result.rowcount
