"""Shared API dependencies — single import point for all routers.

Re-exports database session, authentication and booking-core dependencies
so that router modules can import everything they need from one place::

    from weekstay.api.deps import get_db, get_current_active_user
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from weekstay.auth.dependencies import (
    get_current_active_user,
    get_current_user,
    require_admin,
)
from weekstay.booking.ledger import CreditLedger
from weekstay.config import settings
from weekstay.database import get_db
from weekstay.services.booking_service import BookingService


def get_credit_ledger() -> CreditLedger:
    return CreditLedger(days_per_credit=settings.booking_days_per_credit)


def get_booking_service(
    db: AsyncSession = Depends(get_db),
    ledger: CreditLedger = Depends(get_credit_ledger),
) -> BookingService:
    """Build the lifecycle manager with the configured stay policy and ledger."""
    return BookingService(db, policy=settings.stay_policy(), ledger=ledger)


__all__ = [
    "get_db",
    "get_current_user",
    "get_current_active_user",
    "require_admin",
    "get_booking_service",
    "get_credit_ledger",
]
