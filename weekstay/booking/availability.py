"""Availability arbitration — does a window collide with existing stays?"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from weekstay.booking.window import Window
from weekstay.models.booking import Booking, BookingStatus
from weekstay.models.house import House

logger = logging.getLogger(__name__)


class AvailabilityArbiter:
    """Decides whether a house is free for a window.

    Stored bookings keep the departure day in ``check_out``, so a booking
    occupies ``[check_in, check_out + 1 day)``. The half-open overlap test
    ``existing.start < window.end and window.start < existing.end`` becomes
    ``check_in < window.end and check_out >= window.start`` on whole days.
    """

    async def lock_house(self, db: AsyncSession, house_id: uuid.UUID) -> House | None:
        """Load the house with a row lock held until the transaction ends.

        Concurrent bookings of the same house queue up behind the lock on
        PostgreSQL. SQLite has no row locks and ignores ``FOR UPDATE``.
        """
        result = await db.execute(select(House).where(House.id == house_id).with_for_update())
        return result.scalar_one_or_none()

    async def conflicts(
        self,
        db: AsyncSession,
        house_id: uuid.UUID,
        window: Window,
        exclude_booking_id: uuid.UUID | None = None,
    ) -> list[Booking]:
        """Return the non-cancelled bookings of the house that overlap the window."""
        query = select(Booking).where(
            Booking.house_id == house_id,
            Booking.status != BookingStatus.CANCELLED.value,
            Booking.check_in < window.end,
            Booking.check_out >= window.start,
        )
        if exclude_booking_id is not None:
            query = query.where(Booking.id != exclude_booking_id)

        result = await db.execute(query.order_by(Booking.check_in))
        return list(result.scalars().all())

    async def is_available(
        self,
        db: AsyncSession,
        house_id: uuid.UUID,
        window: Window,
        exclude_booking_id: uuid.UUID | None = None,
    ) -> bool:
        clashes = await self.conflicts(db, house_id, window, exclude_booking_id)
        logger.debug(
            "Availability for house %s [%s, %s): %d conflicting booking(s)",
            house_id,
            window.starts_at.isoformat(),
            window.ends_at.isoformat(),
            len(clashes),
        )
        return not clashes
