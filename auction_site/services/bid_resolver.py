"""Proxy (ceiling) bidding.

Every bidder states the most they are willing to pay. The auction remembers
only the winner's maximum, the *ceiling*, and shows a price that is just high
enough to beat the runner-up by one increment:

* the first bid sets the ceiling and the winner; the shown price stays put;
* the winner may raise their own ceiling by at least one increment, which
  leaves the shown price alone;
* anybody else must offer at least the shown price plus one increment. If the
  offer beats the ceiling the challenger takes over and pays
  ``min(amount, ceiling + increment)``; otherwise the incumbent keeps the lead
  and the price rises to ``min(ceiling, amount + increment)``.

Thresholds are inclusive ("at least"), comparisons are exact.
"""

import logging

from auction_site.schemas.bid import BiddingState, BidOutcome

logger = logging.getLogger(__name__)


def _rejected(state: BiddingState) -> BidOutcome:
    return BidOutcome(state=state, accepted=False)


def resolve_bid(
    state: BiddingState,
    bidder_id: int,
    amount: float,
    increment: float,
) -> BidOutcome:
    """Compute the bidding state after ``bidder_id`` offers ``amount``.

    Pure function: ``state`` is never modified and a rejection returns it
    unchanged. ``amount`` is expected to have passed the ``amount >= 0`` check.
    """
    if not state.has_winner:
        # The first ceiling may not sit below the price already on display
        if amount < state.current_price:
            return _rejected(state)
        return BidOutcome(
            state=state.model_copy(update={"winner_id": bidder_id, "ceiling": amount}),
            accepted=True,
        )

    if bidder_id == state.winner_id:
        if amount < state.ceiling + increment:
            return _rejected(state)
        return BidOutcome(
            state=state.model_copy(update={"ceiling": amount}),
            accepted=True,
        )

    if amount < state.current_price or amount < state.current_price + increment:
        return _rejected(state)

    if amount > state.ceiling:
        next_state = BiddingState(
            current_price=min(amount, state.ceiling + increment),
            winner_id=bidder_id,
            ceiling=amount,
        )
    else:
        next_state = state.model_copy(
            update={"current_price": min(state.ceiling, amount + increment)}
        )

    logger.debug(
        "Bid %s by user %s: price %s -> %s, winner %s -> %s",
        amount,
        bidder_id,
        state.current_price,
        next_state.current_price,
        state.winner_id,
        next_state.winner_id,
    )
    return BidOutcome(state=next_state, accepted=True)
