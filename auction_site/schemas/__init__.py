from auction_site.schemas.auction import AuctionCreate, AuctionInfo
from auction_site.schemas.base import parse_input
from auction_site.schemas.bid import BidAmount, BiddingState, BidOutcome
from auction_site.schemas.session import SessionInfo
from auction_site.schemas.site import SiteCreate, SiteInfo, SiteName
from auction_site.schemas.user import UserCredentials, UserInfo

__all__ = [
    "parse_input",
    "SiteCreate",
    "SiteInfo",
    "SiteName",
    "UserCredentials",
    "UserInfo",
    "SessionInfo",
    "AuctionCreate",
    "AuctionInfo",
    "BidAmount",
    "BiddingState",
    "BidOutcome",
]
