"""Booking lifecycle — create, cancel, list and delete stays.

A booking goes ``confirmed -> cancelled`` and never back. Creating one runs
the checks in this order:

1. parse and anchor the dates (``InvalidWindow`` for garbage or reversed dates)
2. lock the house row (``NotFound`` if it does not exist)
3. availability (``DateConflict``)
4. credit balance for non-admins (``InsufficientCredits``)
5. weekday and length policy (``InvalidWindow``)

then inserts the booking and debits the renter inside the caller's
transaction. Sending the confirmation e-mail is left to the caller.

The conflict check runs before the policy checks on purpose: a request that
overlaps a confirmed stay is reported as ``DateConflict`` even when it also
breaks the weekday rules or the renter cannot pay.
"""

import logging
import uuid
from collections.abc import Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from weekstay.booking.availability import AvailabilityArbiter
from weekstay.booking.errors import AlreadyCancelled, DateConflict, NotFound
from weekstay.booking.ledger import CreditAccount, CreditLedger
from weekstay.booking.window import RawDate, StayPolicy
from weekstay.models.booking import Booking, BookingStatus
from weekstay.models.user import User

logger = logging.getLogger(__name__)


class BookingService:
    def __init__(
        self,
        db: AsyncSession,
        policy: StayPolicy,
        ledger: CreditLedger | None = None,
        arbiter: AvailabilityArbiter | None = None,
    ) -> None:
        self.db = db
        self.policy = policy
        self.ledger = ledger or CreditLedger()
        self.arbiter = arbiter or AvailabilityArbiter()

    async def create(
        self,
        house_id: uuid.UUID,
        renter: User,
        raw_start: RawDate,
        raw_end: RawDate,
    ) -> Booking:
        window = self.policy.anchor(raw_start, raw_end)

        house = await self.arbiter.lock_house(self.db, house_id)
        if house is None:
            raise NotFound("House not found")

        if not await self.arbiter.is_available(self.db, house_id, window):
            logger.info(
                "Rejected booking of house %s for %s..%s by user %s: dates taken",
                house_id,
                window.check_in,
                window.check_out,
                renter.id,
            )
            raise DateConflict("These dates are not available")

        weeks = self.ledger.cost(window)
        self.ledger.apply_debit(CreditAccount.of(renter), weeks)

        self.policy.validate(window)

        booking = Booking(
            house_id=house_id,
            user_id=renter.id,
            check_in=window.check_in,
            check_out=window.check_out,
            status=BookingStatus.CONFIRMED.value,
        )
        self.db.add(booking)
        await self.db.flush()

        await self.ledger.debit(self.db, renter, weeks)

        await self.db.refresh(booking)
        logger.info(
            "Booking %s confirmed: house %s, %s..%s, user %s",
            booking.id,
            house_id,
            booking.check_in,
            booking.check_out,
            renter.id,
        )
        return booking

    async def cancel(self, booking_id: uuid.UUID, requester: User) -> Booking:
        result = await self.db.execute(
            select(Booking).where(Booking.id == booking_id, Booking.user_id == requester.id)
        )
        booking = result.scalar_one_or_none()
        if booking is None:
            raise NotFound("Booking not found or unauthorized")

        if booking.status == BookingStatus.CANCELLED:
            raise AlreadyCancelled("Booking is already cancelled")

        booking.status = BookingStatus.CANCELLED.value
        await self.db.flush()

        # Refund follows the stored dates, not what was charged at booking time.
        weeks = self.ledger.cost(booking.window)
        await self.ledger.refund(self.db, requester, weeks)

        await self.db.refresh(booking)
        logger.info("Booking %s cancelled by user %s", booking.id, requester.id)
        return booking

    async def list_for_house(self, house_id: uuid.UUID) -> Sequence[Booking]:
        result = await self.db.execute(
            select(Booking)
            .where(Booking.house_id == house_id, Booking.status != BookingStatus.CANCELLED.value)
            .order_by(Booking.check_in)
        )
        return result.scalars().all()

    async def list_for_renter(self, renter_id: uuid.UUID) -> Sequence[Booking]:
        result = await self.db.execute(
            select(Booking)
            .options(selectinload(Booking.house))
            .where(Booking.user_id == renter_id)
            .order_by(Booking.check_in.asc())
        )
        return result.scalars().all()

    async def list_all(self) -> Sequence[Booking]:
        result = await self.db.execute(
            select(Booking)
            .options(selectinload(Booking.house), selectinload(Booking.user))
            .order_by(Booking.check_in.asc())
        )
        return result.scalars().all()

    async def delete(self, booking_id: uuid.UUID) -> None:
        """Hard-delete a booking. No credits move."""
        result = await self.db.execute(delete(Booking).where(Booking.id == booking_id))
        if result.rowcount == 0:
            raise NotFound("Booking not found")
        logger.info("Booking %s deleted", booking_id)
