"""Pydantic v2 request/response schemas for house endpoints."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class HouseCreate(BaseModel):
    """Schema for creating a new house."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None


class HouseUpdate(BaseModel):
    """Schema for partially updating a house. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class HouseSummary(BaseModel):
    """Just enough of a house to label it in lists."""

    id: uuid.UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


class HouseResponse(HouseSummary):
    """Full house information returned from the API."""

    description: str | None = None
    created_at: datetime
    updated_at: datetime
