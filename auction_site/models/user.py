from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from auction_site.core.constraints import DomainConstraints
from auction_site.core.database import Base

if TYPE_CHECKING:
    from auction_site.models.auction import Auction
    from auction_site.models.session import UserSession
    from auction_site.models.site import Site


class User(Base):
    """User ORM model"""

    __tablename__ = "users"
    # The same username may be registered on different sites
    __table_args__ = (
        UniqueConstraint("site_id", "username", name="uq_users_site_username"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    site_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("sites.id", ondelete="CASCADE"), nullable=False, index=True
    )
    username: Mapped[str] = mapped_column(
        String(DomainConstraints.MAX_USERNAME), nullable=False, index=True
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    site: Mapped["Site"] = relationship("Site", back_populates="users")
    session: Mapped[Optional["UserSession"]] = relationship(
        "UserSession", back_populates="user", passive_deletes=True
    )
    auctions: Mapped[list["Auction"]] = relationship(
        "Auction",
        back_populates="seller",
        foreign_keys="Auction.seller_id",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"
