"""Property catalog schemas (the subset the booking engine relies on)."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from app.schemas.base import BaseSchema, IDMixin, TimestampMixin


class PropertyCreate(BaseSchema):
    """Create a property."""

    name: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)
    country: str = Field(..., min_length=1, max_length=100)
    city: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    images: list[str] = []


class PropertyResponse(BaseSchema, IDMixin, TimestampMixin):
    """Property response with derived occupancy."""

    name: str
    location: str
    country: str
    city: Optional[str] = None
    description: Optional[str] = None
    images: list[str] = []
    is_rented: bool = False


class RentalIntervalResponse(BaseSchema):
    """One interval of a property's rental history."""

    rental_id: UUID
    member_id: Optional[UUID] = None
    start_date: datetime
    end_date: datetime


class OccupancyResponse(BaseSchema):
    property_id: UUID
    at: datetime
    occupied: bool
