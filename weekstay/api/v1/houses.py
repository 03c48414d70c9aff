"""Houses API routes — administrators manage, renters browse their assignments."""

import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from weekstay.api.deps import get_current_active_user, get_db, require_admin
from weekstay.models.booking import Booking, BookingStatus
from weekstay.models.house import House
from weekstay.models.user import User
from weekstay.schemas.auth import MessageResponse
from weekstay.schemas.house import HouseCreate, HouseResponse, HouseUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/houses", tags=["houses"])


async def _get_house_or_404(db: AsyncSession, house_id: uuid.UUID) -> House:
    result = await db.execute(select(House).where(House.id == house_id))
    house = result.scalar_one_or_none()
    if house is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="House not found",
        )
    return house


@router.get(
    "",
    response_model=list[HouseResponse],
    summary="List houses visible to the current user",
)
async def list_houses(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[HouseResponse]:
    """Administrators see every house; renters see the houses assigned to them."""
    if current_user.is_admin:
        result = await db.execute(select(House).order_by(House.name))
        houses = list(result.scalars().all())
    else:
        houses = sorted(current_user.assigned_houses, key=lambda h: h.name)
    return [HouseResponse.model_validate(h) for h in houses]


@router.get(
    "/{house_id}",
    response_model=HouseResponse,
    summary="Get a house by ID",
)
async def get_house(
    house_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> HouseResponse:
    return HouseResponse.model_validate(await _get_house_or_404(db, house_id))


@router.post(
    "",
    response_model=HouseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a house (admin)",
)
async def create_house(
    body: HouseCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> HouseResponse:
    house = House(**body.model_dump())
    db.add(house)
    await db.flush()
    await db.refresh(house)
    logger.info("Created house %s (%s)", house.id, house.name)
    return HouseResponse.model_validate(house)


@router.put(
    "/{house_id}",
    response_model=HouseResponse,
    summary="Update a house (admin)",
)
async def update_house(
    house_id: uuid.UUID,
    body: HouseUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> HouseResponse:
    """Partially update a house. Only explicitly set fields are changed."""
    house = await _get_house_or_404(db, house_id)

    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(house, field, value)

    await db.flush()
    await db.refresh(house)
    return HouseResponse.model_validate(house)


@router.delete(
    "/{house_id}",
    response_model=MessageResponse,
    summary="Delete a house (admin)",
)
async def delete_house(
    house_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> MessageResponse:
    """Delete a house along with its past bookings.

    Refused while any non-cancelled booking has not ended yet.
    """
    house = await _get_house_or_404(db, house_id)

    active_count = (
        await db.execute(
            select(func.count())
            .select_from(Booking)
            .where(
                Booking.house_id == house_id,
                Booking.status != BookingStatus.CANCELLED.value,
                Booking.check_out >= datetime.now(timezone.utc).date(),
            )
        )
    ).scalar_one()
    if active_count:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete house with active bookings",
        )

    await db.execute(delete(Booking).where(Booking.house_id == house_id))
    await db.delete(house)
    await db.flush()
    logger.info("Deleted house %s and its past bookings", house_id)
    return MessageResponse(message="House and associated past bookings deleted")
