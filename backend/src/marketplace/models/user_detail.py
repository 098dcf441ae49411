"""Contact details for buyers and sellers."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from marketplace.core.database import Base
from marketplace.models.base import TimestampMixin


class UserDetail(Base, TimestampMixin):
    """Name and phone/email contact used for notifications."""

    __tablename__ = "user_details"

    user_id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=False,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    mob_no: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )
    alt_mob_no: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )
    email: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
