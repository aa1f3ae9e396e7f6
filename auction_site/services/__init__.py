from auction_site.services import (
    auction_service,
    bid_resolver,
    session_service,
    site_service,
)

__all__ = [
    "auction_service",
    "bid_resolver",
    "session_service",
    "site_service",
]
