"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    """Schema for reserving a house.

    ``end_date`` is the check-out day. Dates may carry a time and offset; the
    booking core reduces them to UTC calendar days and applies the stay
    policy, so no date rules are enforced here.
    """

    house_id: uuid.UUID
    start_date: datetime | date = Field(..., union_mode="left_to_right")
    end_date: datetime | date = Field(..., union_mode="left_to_right")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """Standard booking response."""

    id: uuid.UUID
    house_id: uuid.UUID
    user_id: uuid.UUID
    check_in: date
    check_out: date
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RenterBookingResponse(BookingResponse):
    """A renter's own booking, labelled with the house name."""

    house_name: str | None = None


class AdminBookingResponse(RenterBookingResponse):
    """Booking as listed to administrators."""

    username: str | None = None
