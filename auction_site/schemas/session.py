from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from auction_site.schemas.user import UserInfo


class SessionInfo(BaseModel):
    """Login session handed back to the caller.

    ``valid_until`` is a snapshot: the session may expire or be slid forward
    after this object was built, so services re-read the stored expiry on use.
    """

    id: UUID
    valid_until: datetime
    user: UserInfo

    model_config = ConfigDict(frozen=True)
