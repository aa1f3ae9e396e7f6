from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from auction_site.schemas.user import UserInfo


class AuctionCreate(BaseModel):
    """Request schema for putting an item up for auction"""

    description: str = Field(..., min_length=1, max_length=1000)
    ends_on: datetime
    starting_price: float = Field(..., ge=0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "description": "Leica M3, 1957, with 50mm Summicron",
                "ends_on": "2024-12-02T11:00:00+01:00",
                "starting_price": 900.0,
            }
        }
    )


class AuctionInfo(BaseModel):
    """Public view of an auction (the winning ceiling is never included)"""

    id: int
    site_id: int
    description: str
    ends_on: datetime
    starting_price: float
    current_price: float
    seller: UserInfo
    is_open: bool

    model_config = ConfigDict(frozen=True)
