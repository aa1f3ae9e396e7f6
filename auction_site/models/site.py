from typing import TYPE_CHECKING

from sqlalchemy import Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from auction_site.core.constraints import DomainConstraints
from auction_site.core.database import Base

if TYPE_CHECKING:
    from auction_site.models.auction import Auction
    from auction_site.models.session import UserSession
    from auction_site.models.user import User


class Site(Base):
    """Site (tenant) ORM model"""

    __tablename__ = "sites"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Unique across the whole host, case-sensitive
    name: Mapped[str] = mapped_column(
        String(DomainConstraints.MAX_SITE_NAME), unique=True, nullable=False, index=True
    )
    timezone: Mapped[int] = mapped_column(Integer, nullable=False)
    session_expiration_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    minimum_bid_increment: Mapped[float] = mapped_column(Float, nullable=False)

    users: Mapped[list["User"]] = relationship(
        "User", back_populates="site", passive_deletes=True
    )
    sessions: Mapped[list["UserSession"]] = relationship(
        "UserSession", back_populates="site", passive_deletes=True
    )
    auctions: Mapped[list["Auction"]] = relationship(
        "Auction", back_populates="site", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Site(id={self.id}, name={self.name})>"
