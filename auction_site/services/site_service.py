import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from auction_site.core.clock import Clock
from auction_site.core.database import store_operation
from auction_site.core.errors import (
    AlreadyExistsError,
    InvalidStateError,
    NotFoundError,
)
from auction_site.core.security import get_password_hash
from auction_site.models import Auction, Site, User, UserSession
from auction_site.schemas import (
    AuctionInfo,
    SessionInfo,
    SiteCreate,
    SiteInfo,
    SiteName,
    UserCredentials,
    UserInfo,
    parse_input,
)

logger = logging.getLogger(__name__)


async def get_site_or_raise(db: AsyncSession, name: str) -> Site:
    """Look a site up by name, raising NotFoundError if it does not exist"""
    site_name = parse_input(SiteName, name=name).name
    result = await db.execute(select(Site).where(Site.name == site_name))
    site = result.scalar_one_or_none()
    if site is None:
        raise NotFoundError(f"Site {site_name!r} does not exist")
    return site


async def get_user_or_raise(db: AsyncSession, site: Site, username: str) -> User:
    result = await db.execute(
        select(User).where(User.site_id == site.id, User.username == username)
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError(f"User {username!r} does not exist on site {site.name!r}")
    return user


def auction_info(auction: Auction, seller: User, clock: Clock) -> AuctionInfo:
    return AuctionInfo(
        id=auction.id,
        site_id=auction.site_id,
        description=auction.description,
        ends_on=clock.localize(auction.ends_on),
        starting_price=auction.starting_price,
        current_price=auction.current_price,
        seller=UserInfo.model_validate(seller),
        is_open=auction.is_open(clock.now()),
    )


@store_operation
async def create_site(
    db: AsyncSession,
    name: str,
    timezone: int,
    session_expiration_seconds: int,
    minimum_bid_increment: float,
) -> SiteInfo:
    """Create a new site; names are unique across the whole host"""
    data = parse_input(
        SiteCreate,
        name=name,
        timezone=timezone,
        session_expiration_seconds=session_expiration_seconds,
        minimum_bid_increment=minimum_bid_increment,
    )

    existing = await db.execute(select(Site.id).where(Site.name == data.name))
    if existing.first() is not None:
        raise AlreadyExistsError(f"Site {data.name!r} already exists")

    site = Site(**data.model_dump())
    db.add(site)
    try:
        await db.commit()
    except IntegrityError as exc:
        raise AlreadyExistsError(f"Site {data.name!r} already exists") from exc

    logger.info("Created site %r (timezone %+d)", site.name, site.timezone)
    return SiteInfo.model_validate(site)


@store_operation
async def get_site_infos(db: AsyncSession) -> list[SiteInfo]:
    """Names and configuration of every managed site"""
    result = await db.execute(select(Site).order_by(Site.name))
    return [SiteInfo.model_validate(site) for site in result.scalars().all()]


@store_operation
async def load_site(db: AsyncSession, name: str) -> SiteInfo:
    site = await get_site_or_raise(db, name)
    return SiteInfo.model_validate(site)


@store_operation
async def delete_site(db: AsyncSession, name: str) -> None:
    """Delete a site together with its auctions, sessions and users"""
    site = await get_site_or_raise(db, name)

    await db.execute(delete(Auction).where(Auction.site_id == site.id))
    await db.execute(delete(UserSession).where(UserSession.site_id == site.id))
    await db.execute(delete(User).where(User.site_id == site.id))
    await db.execute(delete(Site).where(Site.id == site.id))
    await db.commit()
    db.expunge_all()

    logger.info("Deleted site %r", name)


@store_operation
async def create_user(
    db: AsyncSession, site_name: str, username: str, password: str
) -> UserInfo:
    """Register a user; usernames are unique within a site"""
    credentials = parse_input(UserCredentials, username=username, password=password)
    site = await get_site_or_raise(db, site_name)

    existing = await db.execute(
        select(User.id).where(
            User.site_id == site.id, User.username == credentials.username
        )
    )
    if existing.first() is not None:
        raise AlreadyExistsError(
            f"User {credentials.username!r} already exists on site {site.name!r}"
        )

    user = User(
        site_id=site.id,
        username=credentials.username,
        password_hash=get_password_hash(credentials.password),
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as exc:
        raise AlreadyExistsError(
            f"User {credentials.username!r} already exists on site {site.name!r}"
        ) from exc

    logger.info("Created user %r on site %r", user.username, site.name)
    return UserInfo.model_validate(user)


@store_operation
async def get_users(db: AsyncSession, site_name: str) -> list[UserInfo]:
    site = await get_site_or_raise(db, site_name)
    result = await db.execute(
        select(User).where(User.site_id == site.id).order_by(User.username)
    )
    return [UserInfo.model_validate(user) for user in result.scalars().all()]


@store_operation
async def get_sessions(db: AsyncSession, site_name: str, clock: Clock) -> list[SessionInfo]:
    """Live sessions of the site"""
    site = await get_site_or_raise(db, site_name)
    result = await db.execute(
        select(UserSession, User)
        .join(User, UserSession.user_id == User.id)
        .where(UserSession.site_id == site.id, UserSession.valid_until > clock.now())
        .order_by(User.username)
    )
    return [
        SessionInfo(
            id=session.id,
            valid_until=clock.localize(session.valid_until),
            user=UserInfo.model_validate(user),
        )
        for session, user in result.all()
    ]


@store_operation
async def get_auctions(
    db: AsyncSession, site_name: str, clock: Clock, only_not_ended: bool = False
) -> list[AuctionInfo]:
    """Auctions of the site, optionally restricted to the ones still open"""
    site = await get_site_or_raise(db, site_name)
    query = (
        select(Auction, User)
        .join(User, Auction.seller_id == User.id)
        .where(Auction.site_id == site.id)
        .order_by(Auction.id)
    )
    if only_not_ended:
        query = query.where(Auction.ends_on > clock.now())
    result = await db.execute(query)
    return [auction_info(auction, seller, clock) for auction, seller in result.all()]


@store_operation
async def won_auctions(
    db: AsyncSession, site_name: str, username: str, clock: Clock
) -> list[AuctionInfo]:
    """Closed auctions whose final winner is the given user"""
    site = await get_site_or_raise(db, site_name)
    user = await get_user_or_raise(db, site, username)
    result = await db.execute(
        select(Auction, User)
        .join(User, Auction.seller_id == User.id)
        .where(
            Auction.site_id == site.id,
            Auction.winner_id == user.id,
            Auction.ends_on <= clock.now(),
        )
        .order_by(Auction.id)
    )
    return [auction_info(auction, seller, clock) for auction, seller in result.all()]


@store_operation
async def delete_user(db: AsyncSession, site_name: str, username: str, clock: Clock) -> None:
    """
    Delete a user and their session.

    Refused while the user sells or is winning an auction that is still open.
    Closed auctions they sold go with them; closed auctions they won keep
    their final price but no longer reference a winner.
    """
    site = await get_site_or_raise(db, site_name)
    user = await get_user_or_raise(db, site, username)
    now = clock.now()

    open_involvement = await db.execute(
        select(Auction.id).where(
            Auction.site_id == site.id,
            Auction.ends_on > now,
            (Auction.seller_id == user.id) | (Auction.winner_id == user.id),
        )
    )
    if open_involvement.first() is not None:
        raise InvalidStateError(
            f"User {username!r} is selling or winning an auction that is still open"
        )

    await db.execute(delete(UserSession).where(UserSession.user_id == user.id))
    await db.execute(delete(Auction).where(Auction.seller_id == user.id))
    await db.execute(
        update(Auction).where(Auction.winner_id == user.id).values(winner_id=None)
    )
    await db.execute(delete(User).where(User.id == user.id))
    await db.commit()
    db.expunge_all()

    logger.info("Deleted user %r from site %r", username, site.name)
