"""House model — the properties renters can book."""

from sqlalchemy import Column, ForeignKey, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from weekstay.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

house_assignments = Table(
    "house_assignments",
    Base.metadata,
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("house_id", ForeignKey("houses.id", ondelete="CASCADE"), primary_key=True),
)


class House(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A vacation house. Regular users only see houses assigned to them."""

    __tablename__ = "houses"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)

    # Relationships
    assigned_users: Mapped[list["User"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        secondary=house_assignments, back_populates="assigned_houses", lazy="selectin"
    )
    bookings: Mapped[list["Booking"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="house", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<House(id={self.id}, name={self.name!r})>"
