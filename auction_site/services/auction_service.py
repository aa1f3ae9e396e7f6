import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from auction_site.core.clock import Clock
from auction_site.core.database import store_operation
from auction_site.core.errors import (
    AuctionClosedError,
    AuctionGoneError,
    CrossTenantForbiddenError,
    InvalidArgumentError,
    NotFoundError,
    SelfBidForbiddenError,
    TemporalViolationError,
)
from auction_site.core.locks import auction_locks
from auction_site.models import Auction, Site, User
from auction_site.schemas import (
    AuctionCreate,
    AuctionInfo,
    BidAmount,
    BiddingState,
    UserInfo,
    parse_input,
)
from auction_site.services.bid_resolver import resolve_bid
from auction_site.services.session_service import (
    refresh_session,
    require_live_session,
)
from auction_site.services.site_service import auction_info

logger = logging.getLogger(__name__)


async def _load_auction(
    db: AsyncSession,
    auction_id: int,
    for_update: bool = False,
    missing: type[NotFoundError] = NotFoundError,
) -> Auction:
    query = (
        select(Auction)
        .where(Auction.id == auction_id)
        .execution_options(populate_existing=True)
    )
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    auction = result.scalar_one_or_none()
    if auction is None:
        raise missing(f"Auction {auction_id} does not exist")
    return auction


async def _load_site(db: AsyncSession, site_id: int) -> Site:
    result = await db.execute(select(Site).where(Site.id == site_id))
    site = result.scalar_one_or_none()
    if site is None:
        raise NotFoundError(f"Site {site_id} does not exist")
    return site


@store_operation
async def create_auction(
    db: AsyncSession,
    session_id: UUID,
    description: str,
    ends_on: datetime,
    starting_price: float,
    clock: Clock,
) -> AuctionInfo:
    """
    Put an item up for auction on behalf of the session's user.

    A naive ``ends_on`` is read as site-local time. The auction starts at
    ``starting_price`` with no winner and the session's expiry slides forward.
    """
    if not description:
        raise InvalidArgumentError("description must not be empty")
    if not isinstance(ends_on, datetime):
        raise InvalidArgumentError("ends_on must be a datetime")
    ends_on = clock.localize(ends_on)
    if ends_on <= clock.now():
        raise TemporalViolationError("cannot schedule an auction ending in the past")
    data = parse_input(
        AuctionCreate,
        description=description,
        ends_on=ends_on,
        starting_price=starting_price,
    )

    session, seller = await require_live_session(db, session_id, clock)
    site = await _load_site(db, seller.site_id)
    await refresh_session(db, session, site, clock)

    auction = Auction(
        site_id=site.id,
        seller_id=seller.id,
        description=data.description,
        ends_on=data.ends_on,
        starting_price=data.starting_price,
        current_price=data.starting_price,
        winner_id=None,
        ceiling=0.0,
    )
    db.add(auction)
    await db.commit()

    logger.info(
        "User %r opened auction %s on site %r until %s",
        seller.username,
        auction.id,
        site.name,
        auction.ends_on.isoformat(),
    )
    return auction_info(auction, seller, clock)


@store_operation
async def delete_auction(db: AsyncSession, auction_id: int) -> None:
    """Remove an auction whatever its state"""
    async with auction_locks.hold(auction_id):
        result = await db.execute(delete(Auction).where(Auction.id == auction_id))
        if result.rowcount == 0:
            raise NotFoundError(f"Auction {auction_id} does not exist")
        await db.commit()
    logger.info("Deleted auction %s", auction_id)


@store_operation
async def get_auction(db: AsyncSession, auction_id: int, clock: Clock) -> AuctionInfo:
    result = await db.execute(
        select(Auction, User)
        .join(User, Auction.seller_id == User.id)
        .where(Auction.id == auction_id)
    )
    row = result.first()
    if row is None:
        raise NotFoundError(f"Auction {auction_id} does not exist")
    auction, seller = row
    return auction_info(auction, seller, clock)


@store_operation
async def current_price(db: AsyncSession, auction_id: int) -> float:
    result = await db.execute(
        select(Auction.current_price).where(Auction.id == auction_id)
    )
    price = result.scalar_one_or_none()
    if price is None:
        raise NotFoundError(f"Auction {auction_id} does not exist")
    return price


@store_operation
async def current_winner(
    db: AsyncSession, auction_id: int, clock: Clock
) -> UserInfo | None:
    """The user currently winning, or None if nobody bid or the auction ended"""
    auction = await _load_auction(db, auction_id)
    if not auction.is_open(clock.now()) or auction.winner_id is None:
        return None
    result = await db.execute(select(User).where(User.id == auction.winner_id))
    winner = result.scalar_one_or_none()
    return UserInfo.model_validate(winner) if winner is not None else None


@store_operation
async def bid(
    db: AsyncSession,
    auction_id: int,
    session_id: UUID | None,
    amount: float,
    clock: Clock,
) -> bool:
    """
    Place a bid on an open auction.

    Returns True when the bid registered (new winner, raised ceiling or a
    higher shown price) and False when it was too low to matter. Malformed or
    forbidden bids raise instead; a missing auction counts as closed. Only one
    bid per auction is resolved at a time; the admission checks and the state
    transition commit together.
    """
    async with auction_locks.hold(auction_id):
        auction = await _load_auction(
            db, auction_id, for_update=True, missing=AuctionGoneError
        )
        if not auction.is_open(clock.now()):
            raise AuctionClosedError(f"Auction {auction_id} has ended")

        offer = parse_input(BidAmount, amount=amount).amount

        session, bidder = await require_live_session(db, session_id, clock)

        if bidder.id == auction.seller_id:
            logger.warning(
                "User %r tried to bid on own auction %s", bidder.username, auction_id
            )
            raise SelfBidForbiddenError("sellers cannot bid on their own auction")

        if bidder.site_id != auction.site_id:
            logger.warning(
                "User %r of site %s tried to bid on auction %s of site %s",
                bidder.username,
                bidder.site_id,
                auction_id,
                auction.site_id,
            )
            raise CrossTenantForbiddenError("bidder and seller belong to different sites")

        site = await _load_site(db, auction.site_id)
        await refresh_session(db, session, site, clock)

        outcome = resolve_bid(
            BiddingState(
                current_price=auction.current_price,
                winner_id=auction.winner_id,
                ceiling=auction.ceiling,
            ),
            bidder_id=bidder.id,
            amount=offer,
            increment=site.minimum_bid_increment,
        )
        if outcome.accepted:
            auction.current_price = outcome.state.current_price
            auction.winner_id = outcome.state.winner_id
            auction.ceiling = outcome.state.ceiling

        await db.commit()

    logger.info(
        "Bid of %s by %r on auction %s %s",
        offer,
        bidder.username,
        auction_id,
        "accepted" if outcome.accepted else "rejected",
    )
    return outcome.accepted
