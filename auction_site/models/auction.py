from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from auction_site.core.database import Base, UTCDateTime

if TYPE_CHECKING:
    from auction_site.models.site import Site
    from auction_site.models.user import User


class Auction(Base):
    """Auction ORM model"""

    __tablename__ = "auctions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    site_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("sites.id", ondelete="CASCADE"), nullable=False, index=True
    )
    seller_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    description: Mapped[str] = mapped_column(String(1000), nullable=False)
    ends_on: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)
    starting_price: Mapped[float] = mapped_column(Float, nullable=False)

    # bidding state - written only by the bid path
    current_price: Mapped[float] = mapped_column(Float, nullable=False)
    winner_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    # winner's secret maximum, never part of a read view
    ceiling: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    site: Mapped["Site"] = relationship("Site", back_populates="auctions")
    seller: Mapped["User"] = relationship(
        "User", back_populates="auctions", foreign_keys=[seller_id]
    )
    winner: Mapped[Optional["User"]] = relationship("User", foreign_keys=[winner_id])

    def is_open(self, now: datetime) -> bool:
        return now < self.ends_on

    def __repr__(self) -> str:
        return f"<Auction(id={self.id}, site_id={self.site_id})>"
