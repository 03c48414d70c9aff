"""Pydantic v2 request/response schemas for user administration."""

import uuid

from pydantic import BaseModel, EmailStr, Field

from weekstay.models.user import UserRole
from weekstay.schemas.auth import UserResponse
from weekstay.schemas.house import HouseSummary

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class UserCreate(BaseModel):
    """Schema for an administrator creating an account. Credits start at zero."""

    username: str = Field(..., min_length=1, max_length=150)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    role: UserRole = UserRole.USER


class UserUpdate(BaseModel):
    """Schema for partially updating an account. All fields optional."""

    username: str | None = Field(None, min_length=1, max_length=150)
    email: EmailStr | None = None
    role: UserRole | None = None
    is_active: bool | None = None


class HouseAssignmentUpdate(BaseModel):
    """Replace the full set of houses assigned to a user."""

    house_ids: list[uuid.UUID]


class CreditsAdd(BaseModel):
    """Credits to add to a user's balance."""

    credits: int = Field(..., ge=1)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class UserDetailResponse(UserResponse):
    """User profile with the houses assigned to them."""

    assigned_houses: list[HouseSummary] = []


class CreditsResponse(BaseModel):
    credits: int
