"""Bookings API router.

Renters create, list and cancel their own weekly stays; administrators list
and hard-delete any booking. The rules themselves live in
``weekstay.services.booking_service``; domain errors are turned into HTTP
responses by the handler registered in ``weekstay.main``.
"""

import uuid

from fastapi import APIRouter, BackgroundTasks, Depends, status

from weekstay.api.deps import get_booking_service, get_current_active_user, require_admin
from weekstay.models.booking import Booking
from weekstay.models.user import User
from weekstay.schemas.auth import MessageResponse
from weekstay.schemas.booking import (
    AdminBookingResponse,
    BookingCreate,
    BookingResponse,
    RenterBookingResponse,
)
from weekstay.services.booking_service import BookingService
from weekstay.services.notifications import compose_booking_confirmation, send_booking_confirmation

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a house for one week",
)
async def create_booking(
    body: BookingCreate,
    background_tasks: BackgroundTasks,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    """Reserve a house and debit the renter's credits.

    The confirmation e-mail goes out after the response; its failure never
    affects the booking.
    """
    booking = await service.create(body.house_id, current_user, body.start_date, body.end_date)

    background_tasks.add_task(
        send_booking_confirmation,
        compose_booking_confirmation(
            to=current_user.email,
            house_name=booking.house.name,
            check_in=booking.check_in,
            check_out=booking.check_out,
            credits=current_user.credits,
        ),
    )
    return booking


@router.get(
    "",
    response_model=list[AdminBookingResponse],
    summary="List every booking (admin)",
)
async def list_all_bookings(
    service: BookingService = Depends(get_booking_service),
    _admin: User = Depends(require_admin),
) -> list[Booking]:
    return list(await service.list_all())


@router.get(
    "/me",
    response_model=list[RenterBookingResponse],
    summary="List the current user's bookings",
)
async def list_my_bookings(
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user),
) -> list[Booking]:
    """All of the caller's bookings, any status, earliest check-in first."""
    return list(await service.list_for_renter(current_user.id))


@router.get(
    "/house/{house_id}",
    response_model=list[BookingResponse],
    summary="List active bookings of a house",
)
async def list_house_bookings(
    house_id: uuid.UUID,
    service: BookingService = Depends(get_booking_service),
    _user: User = Depends(get_current_active_user),
) -> list[Booking]:
    """Non-cancelled bookings, for availability calendars."""
    return list(await service.list_for_house(house_id))


@router.patch(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    summary="Cancel one of your bookings",
)
async def cancel_booking(
    booking_id: uuid.UUID,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    """Cancel a booking you own and get its credits back."""
    return await service.cancel(booking_id, current_user)


@router.delete(
    "/{booking_id}",
    response_model=MessageResponse,
    summary="Delete a booking (admin)",
)
async def delete_booking(
    booking_id: uuid.UUID,
    service: BookingService = Depends(get_booking_service),
    _admin: User = Depends(require_admin),
) -> MessageResponse:
    """Remove a booking outright. Credits are not refunded."""
    await service.delete(booking_id)
    return MessageResponse(message="Booking deleted")
