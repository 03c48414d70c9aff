"""Booking model — weekly reservations of a house."""

import enum
import uuid
from datetime import date

from sqlalchemy import Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from weekstay.booking.window import Window
from weekstay.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class BookingStatus(enum.StrEnum):
    # PENDING is declared for a future two-step confirmation flow; nothing
    # creates pending bookings today.
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A renter's stay at a house. ``check_out`` is the departure day."""

    __tablename__ = "bookings"

    house_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("houses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default=BookingStatus.CONFIRMED.value,
        nullable=False,
        index=True,
    )

    # Relationships
    house: Mapped["House"] = relationship(back_populates="bookings", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    user: Mapped["User"] = relationship(back_populates="bookings", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (Index("ix_bookings_house_window", "house_id", "check_in", "check_out"),)

    @property
    def window(self) -> Window:
        return Window.from_stay(self.check_in, self.check_out)

    @property
    def house_name(self) -> str | None:
        return self.house.name if self.house is not None else None

    @property
    def username(self) -> str | None:
        return self.user.username if self.user is not None else None

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, house_id={self.house_id}, user_id={self.user_id}, status={self.status})>"
