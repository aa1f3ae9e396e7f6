"""Error kinds raised by the auction site services.

A bid that is too low is not an error (``bid`` returns ``False``) and a failed
login is not an error either (``login`` returns ``None``). Everything below is
a malformed request or a state that forbids the operation.
"""


class AuctionSiteError(Exception):
    """Base class for every auction site error"""


class InvalidArgumentError(AuctionSiteError, ValueError):
    """Raised for null, empty or out-of-range input"""


class NotFoundError(AuctionSiteError, LookupError):
    """Raised when a referenced site, user, session or auction does not exist"""


class AlreadyExistsError(AuctionSiteError):
    """Raised on a site name or username collision"""


class InvalidStateError(AuctionSiteError):
    """Raised when the entity exists but its state forbids the operation"""


class SessionExpiredError(AuctionSiteError):
    """Raised when the acting session is missing or no longer live"""


class AuctionClosedError(AuctionSiteError):
    """Raised when bidding on an auction whose deadline has passed"""


class AuctionGoneError(AuctionClosedError, NotFoundError):
    """Raised when bidding on an auction that no longer exists"""


class TemporalViolationError(AuctionSiteError):
    """Raised when scheduling an auction ending in the past"""


class SelfBidForbiddenError(AuctionSiteError):
    """Raised when the seller bids on their own auction"""


class CrossTenantForbiddenError(AuctionSiteError):
    """Raised when the bidder belongs to a site other than the seller's"""


class StoreUnavailableError(AuctionSiteError):
    """Raised when the entity store cannot be reached; callers may retry"""

    retryable = True
