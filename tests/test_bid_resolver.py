"""Unit tests for the proxy bidding rules (pure function, no store)."""

import pytest

from auction_site.schemas import BiddingState
from auction_site.services.bid_resolver import resolve_bid

INCUMBENT = 2
CHALLENGER = 3
INCREMENT = 10.0


def with_winner(price=100.0, ceiling=250.0, winner=INCUMBENT):
    return BiddingState(current_price=price, winner_id=winner, ceiling=ceiling)


class TestFirstBid:
    def test_first_bid_sets_ceiling_not_price(self):
        outcome = resolve_bid(BiddingState(current_price=100.0), 2, 250.0, INCREMENT)

        assert outcome.accepted
        assert outcome.state.current_price == 100.0
        assert outcome.state.winner_id == 2
        assert outcome.state.ceiling == 250.0
        assert outcome.state.has_winner

    def test_first_bid_at_starting_price_is_accepted(self):
        outcome = resolve_bid(BiddingState(current_price=100.0), 2, 100.0, INCREMENT)

        assert outcome.accepted
        assert outcome.state.ceiling == 100.0

    def test_first_bid_below_starting_price_is_rejected(self):
        state = BiddingState(current_price=100.0)

        outcome = resolve_bid(state, 2, 99.0, INCREMENT)

        assert not outcome.accepted
        assert outcome.state == state
        assert not outcome.state.has_winner

    def test_first_bid_needs_no_increment(self):
        outcome = resolve_bid(BiddingState(current_price=0.0), 2, 0.0, INCREMENT)

        assert outcome.accepted
        assert outcome.state.winner_id == 2


class TestChallenger:
    def test_overtake_pays_one_increment_over_old_ceiling(self):
        outcome = resolve_bid(with_winner(), CHALLENGER, 300.0, INCREMENT)

        assert outcome.accepted
        assert outcome.state.current_price == 260.0
        assert outcome.state.winner_id == CHALLENGER
        assert outcome.state.ceiling == 300.0

    def test_overtake_by_less_than_increment_pays_full_bid(self):
        outcome = resolve_bid(with_winner(), CHALLENGER, 255.0, INCREMENT)

        assert outcome.accepted
        assert outcome.state.current_price == 255.0
        assert outcome.state.winner_id == CHALLENGER

    def test_bid_below_shown_price_is_rejected(self):
        state = with_winner(price=260.0, ceiling=300.0, winner=CHALLENGER)

        outcome = resolve_bid(state, INCUMBENT, 120.0, INCREMENT)

        assert not outcome.accepted
        assert outcome.state == state

    def test_bid_within_one_increment_of_price_is_rejected(self):
        state = with_winner()

        outcome = resolve_bid(state, CHALLENGER, 105.0, INCREMENT)

        assert not outcome.accepted
        assert outcome.state == state

    def test_exact_price_plus_increment_is_enough(self):
        outcome = resolve_bid(with_winner(), CHALLENGER, 110.0, INCREMENT)

        assert outcome.accepted
        assert outcome.state.current_price == 120.0
        assert outcome.state.winner_id == INCUMBENT

    def test_incumbent_ceiling_outbids_challenger(self):
        outcome = resolve_bid(with_winner(), CHALLENGER, 150.0, INCREMENT)

        assert outcome.accepted
        assert outcome.state.current_price == 160.0
        assert outcome.state.winner_id == INCUMBENT
        assert outcome.state.ceiling == 250.0

    def test_price_never_exceeds_incumbent_ceiling(self):
        outcome = resolve_bid(with_winner(), CHALLENGER, 245.0, INCREMENT)

        assert outcome.state.current_price == 250.0
        assert outcome.state.winner_id == INCUMBENT

    def test_tie_with_ceiling_keeps_incumbent(self):
        outcome = resolve_bid(with_winner(), CHALLENGER, 250.0, INCREMENT)

        assert outcome.accepted
        assert outcome.state.current_price == 250.0
        assert outcome.state.winner_id == INCUMBENT

    def test_zero_increment_accepts_matching_price(self):
        outcome = resolve_bid(with_winner(), CHALLENGER, 100.0, 0.0)

        assert outcome.accepted
        assert outcome.state.current_price == 100.0


class TestIncumbentRaise:
    @pytest.mark.parametrize("amount", [250.0, 255.0, 259.99])
    def test_raise_below_full_increment_is_rejected(self, amount):
        state = with_winner()

        outcome = resolve_bid(state, INCUMBENT, amount, INCREMENT)

        assert not outcome.accepted
        assert outcome.state == state

    def test_raise_by_full_increment_moves_ceiling_only(self):
        outcome = resolve_bid(with_winner(), INCUMBENT, 260.0, INCREMENT)

        assert outcome.accepted
        assert outcome.state.ceiling == 260.0
        assert outcome.state.current_price == 100.0
        assert outcome.state.winner_id == INCUMBENT


def test_price_is_monotonic_and_below_ceiling():
    bids = [
        (2, 150.0),
        (3, 140.0),
        (3, 175.0),
        (2, 170.0),
        (4, 400.0),
        (2, 390.0),
        (4, 405.0),
        (3, 900.0),
        (2, 10.0),
        (4, 905.0),
    ]
    state = BiddingState(current_price=100.0)
    prices = [state.current_price]

    for bidder, amount in bids:
        state = resolve_bid(state, bidder, amount, INCREMENT).state
        prices.append(state.current_price)
        assert state.current_price <= state.ceiling

    assert prices == sorted(prices)
    assert state.winner_id == 4
    assert state.current_price == 905.0
