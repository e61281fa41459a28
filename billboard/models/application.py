from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billboard.db.base import Base


class Application(Base):
    __tablename__ = "applications"

    campaign_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False, index=True
    )
    advertiser_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        String(20), default="pending", server_default="pending"
    )
    message: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    campaign = relationship("Campaign", backref="applications", lazy="selectin")
    advertiser = relationship("UserProfile", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("campaign_id", "advertiser_id"),
    )
