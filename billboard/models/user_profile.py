from enum import StrEnum

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from billboard.db.base import Base


class UserType(StrEnum):
    BUSINESS = "business"
    ADVERTISER = "advertiser"


class UserProfile(Base):
    __tablename__ = "user_profiles"

    auth_subject: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default="")
    full_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    user_type: Mapped[str] = mapped_column(String(20), nullable=False)
    company_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    industry: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    address: Mapped[str | None] = mapped_column(String(200), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(2), nullable=True)
    profile_picture_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    @property
    def display_name(self) -> str:
        if self.user_type == UserType.BUSINESS and self.company_name:
            return self.company_name
        return self.full_name or self.email or "Someone"
