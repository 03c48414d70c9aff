"""User administration routes — accounts, house assignments and credits."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from weekstay.api.deps import get_credit_ledger, get_current_active_user, get_db, require_admin
from weekstay.auth.security import hash_password
from weekstay.booking.ledger import CreditLedger
from weekstay.models.house import House
from weekstay.models.user import User, UserRole
from weekstay.schemas.auth import MessageResponse
from weekstay.schemas.user import (
    CreditsAdd,
    CreditsResponse,
    HouseAssignmentUpdate,
    UserCreate,
    UserDetailResponse,
    UserUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/users", tags=["users"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _get_user_or_404(db: AsyncSession, user_id: uuid.UUID) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


async def _get_houses_or_404(db: AsyncSession, house_ids: list[uuid.UUID]) -> list[House]:
    wanted = set(house_ids)
    if not wanted:
        return []
    result = await db.execute(select(House).where(House.id.in_(wanted)))
    houses = list(result.scalars().all())
    if len(houses) != len(wanted):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="House not found",
        )
    return houses


async def _ensure_unique_identity(
    db: AsyncSession,
    username: str | None,
    email: str | None,
    exclude_user_id: uuid.UUID | None = None,
) -> None:
    """Raise 409 if another account already uses the username or e-mail."""
    clauses = []
    if username is not None:
        clauses.append(User.username == username)
    if email is not None:
        clauses.append(User.email == email)
    if not clauses:
        return

    query = select(User.id).where(or_(*clauses))
    if exclude_user_id is not None:
        query = query.where(User.id != exclude_user_id)
    if (await db.execute(query.limit(1))).first() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this username or email already exists",
        )


async def _count_admins(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(User).where(User.role == UserRole.ADMIN.value))
    return result.scalar_one()


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=list[UserDetailResponse],
    summary="List all users (admin)",
)
async def list_users(
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> list[UserDetailResponse]:
    result = await db.execute(select(User).order_by(User.username))
    return [UserDetailResponse.model_validate(u) for u in result.scalars().all()]


@router.post(
    "",
    response_model=UserDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user (admin)",
)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserDetailResponse:
    """Create an account with a zero credit balance."""
    await _ensure_unique_identity(db, body.username, body.email)

    user = User(
        username=body.username,
        email=body.email,
        hashed_password=hash_password(body.password),
        role=body.role.value,
        credits=0,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    logger.info("Created %s account %s (%s)", user.role, user.username, user.id)
    return UserDetailResponse.model_validate(user)


@router.get(
    "/{user_id}",
    response_model=UserDetailResponse,
    summary="Get a user by ID",
)
async def get_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> UserDetailResponse:
    """Users may read their own profile; administrators may read any."""
    if user_id != current_user.id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return UserDetailResponse.model_validate(await _get_user_or_404(db, user_id))


@router.put(
    "/{user_id}",
    response_model=UserDetailResponse,
    summary="Update a user (admin)",
)
async def update_user(
    user_id: uuid.UUID,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserDetailResponse:
    """Partially update an account. Credits change only through the credits endpoint."""
    user = await _get_user_or_404(db, user_id)
    update_data = body.model_dump(exclude_unset=True)

    await _ensure_unique_identity(
        db, update_data.get("username"), update_data.get("email"), exclude_user_id=user.id
    )

    demoting = user.is_admin and update_data.get("role") not in (None, UserRole.ADMIN)
    if demoting and await _count_admins(db) <= 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot demote the last admin user",
        )

    for field, value in update_data.items():
        setattr(user, field, value.value if isinstance(value, UserRole) else value)

    await db.flush()
    await db.refresh(user)
    return UserDetailResponse.model_validate(user)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    summary="Delete a user (admin)",
)
async def delete_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> MessageResponse:
    user = await _get_user_or_404(db, user_id)

    if user.is_admin and await _count_admins(db) <= 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete the last admin user",
        )

    await db.delete(user)
    await db.flush()
    logger.info("Deleted user %s", user_id)
    return MessageResponse(message="User deleted")


# ---------------------------------------------------------------------------
# House assignments
# ---------------------------------------------------------------------------


@router.put(
    "/{user_id}/houses",
    response_model=UserDetailResponse,
    summary="Replace a user's house assignments (admin)",
)
async def set_assigned_houses(
    user_id: uuid.UUID,
    body: HouseAssignmentUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserDetailResponse:
    user = await _get_user_or_404(db, user_id)
    user.assigned_houses = await _get_houses_or_404(db, body.house_ids)
    await db.flush()
    return UserDetailResponse.model_validate(user)


@router.post(
    "/{user_id}/houses/{house_id}",
    response_model=UserDetailResponse,
    summary="Assign one house to a user (admin)",
)
async def assign_house(
    user_id: uuid.UUID,
    house_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserDetailResponse:
    """Idempotent: assigning an already assigned house changes nothing."""
    user = await _get_user_or_404(db, user_id)
    (house,) = await _get_houses_or_404(db, [house_id])
    if house not in user.assigned_houses:
        user.assigned_houses.append(house)
        await db.flush()
        logger.info("Assigned house %s to user %s", house_id, user_id)
    return UserDetailResponse.model_validate(user)


@router.delete(
    "/{user_id}/houses/{house_id}",
    response_model=UserDetailResponse,
    summary="Remove a house from a user (admin)",
)
async def remove_house(
    user_id: uuid.UUID,
    house_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserDetailResponse:
    user = await _get_user_or_404(db, user_id)
    user.assigned_houses = [h for h in user.assigned_houses if h.id != house_id]
    await db.flush()
    return UserDetailResponse.model_validate(user)


# ---------------------------------------------------------------------------
# Credits
# ---------------------------------------------------------------------------


@router.post(
    "/{user_id}/credits",
    response_model=UserDetailResponse,
    summary="Add credits to a user (admin)",
)
async def add_credits(
    user_id: uuid.UUID,
    body: CreditsAdd,
    db: AsyncSession = Depends(get_db),
    ledger: CreditLedger = Depends(get_credit_ledger),
    _admin: User = Depends(require_admin),
) -> UserDetailResponse:
    user = await _get_user_or_404(db, user_id)
    user = await ledger.top_up(db, user, body.credits)
    return UserDetailResponse.model_validate(user)


@router.get(
    "/{user_id}/credits",
    response_model=CreditsResponse,
    summary="Get a user's credit balance",
)
async def get_credits(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> CreditsResponse:
    """Users may read their own balance; administrators may read any."""
    if user_id != current_user.id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    user = await _get_user_or_404(db, user_id)
    return CreditsResponse(credits=user.credits)
