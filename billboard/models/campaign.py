from decimal import Decimal
from enum import StrEnum

from sqlalchemy import JSON, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billboard.db.base import Base


class CampaignStatus(StrEnum):
    ACTIVE = "active"
    PAUSED = "paused"
    CLOSED = "closed"


class CompensationType(StrEnum):
    HOURLY = "hourly"
    DAILY = "daily"
    PER_EVENT = "per_event"


class Campaign(Base):
    __tablename__ = "campaigns"

    business_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    compensation_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    compensation_type: Mapped[str] = mapped_column(
        String(20), default=CompensationType.HOURLY, server_default="hourly"
    )
    location: Mapped[str] = mapped_column(String(100), nullable=False)
    duration_hours: Mapped[int | None] = mapped_column(Integer, nullable=True)
    requirements: Mapped[str | None] = mapped_column(Text, nullable=True)
    merchandise_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    target_demographics: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=CampaignStatus.ACTIVE, server_default="active"
    )

    # Relationships
    business = relationship("UserProfile", backref="campaigns", lazy="selectin")

    __table_args__ = (
        Index("ix_campaigns_business_status", "business_id", "status"),
    )
