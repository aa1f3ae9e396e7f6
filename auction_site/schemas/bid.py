from pydantic import BaseModel, ConfigDict, Field


class BiddingState(BaseModel):
    """Authoritative bidding state of one auction"""

    current_price: float
    winner_id: int | None = None
    # meaningless while winner_id is None
    ceiling: float = 0.0

    model_config = ConfigDict(frozen=True)

    @property
    def has_winner(self) -> bool:
        return self.winner_id is not None


class BidAmount(BaseModel):
    """A bidder's offer: a finite, non-negative number"""

    amount: float = Field(..., ge=0, allow_inf_nan=False, strict=True)


class BidOutcome(BaseModel):
    """Result of resolving one bid: the next state and whether it registered"""

    state: BiddingState
    accepted: bool

    model_config = ConfigDict(frozen=True)
