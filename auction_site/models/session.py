from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from auction_site.core.database import Base, UTCDateTime

if TYPE_CHECKING:
    from auction_site.models.site import Site
    from auction_site.models.user import User


class UserSession(Base):
    """Login session ORM model (one per user at most)"""

    __tablename__ = "sessions"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    site_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("sites.id", ondelete="CASCADE"), nullable=False, index=True
    )
    valid_until: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)

    user: Mapped["User"] = relationship("User", back_populates="session")
    site: Mapped["Site"] = relationship("Site", back_populates="sessions")

    def is_live(self, now: datetime) -> bool:
        return now < self.valid_until

    def __repr__(self) -> str:
        return f"<UserSession(id={self.id}, user_id={self.user_id})>"
