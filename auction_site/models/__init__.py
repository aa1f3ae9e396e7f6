"""
SQLAlchemy ORM Models

All database models unified export point
"""

from auction_site.models.auction import Auction
from auction_site.models.session import UserSession
from auction_site.models.site import Site
from auction_site.models.user import User

__all__ = [
    "Site",
    "User",
    "UserSession",
    "Auction",
]
