from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from billboard.db.base import Base


class WaitlistSignup(Base):
    __tablename__ = "waitlist_signups"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
