"""Multi-tenant auction site with proxy bidding and sliding login sessions."""

from auction_site.core.config import settings

__version__ = settings.APP_VERSION

__all__ = ["__version__", "settings"]
