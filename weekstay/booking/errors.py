"""Booking domain errors.

These are business-rule failures raised by the booking core. The API layer
turns them into HTTP responses through ``BookingError.to_http_exception``;
they are expected outcomes of bad input, not system faults.
"""

from typing import Any

from fastapi import HTTPException, status


class BookingError(Exception):
    """Base class for all booking-core errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.code = self.__class__.__name__
        self.details = details or {}
        super().__init__(message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.message)


class InvalidWindow(BookingError):
    """The requested dates are malformed or break the stay policy."""


class DateConflict(BookingError):
    """The window overlaps an existing non-cancelled booking."""


class InsufficientCredits(BookingError):
    """The renter's credit balance does not cover the stay."""


class NotFound(BookingError):
    """Booking, house or user is absent, or not owned by the requester."""

    status_code = status.HTTP_404_NOT_FOUND


class AlreadyCancelled(BookingError):
    """Cancelling a booking that is already cancelled."""
