"""Properties router - catalog lookups the booking engine relies on."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import DuplicateError, NotFoundError
from app.core.security import AuthenticatedUser, require_admin
from app.models.property import Property
from app.schemas.base import to_naive_utc
from app.schemas.property import (
    OccupancyResponse,
    PropertyCreate,
    PropertyResponse,
    RentalIntervalResponse,
)
from app.services.availability import AvailabilityIndex, is_occupied
from app.services.booking_workflow import BookingWorkflow, get_booking_workflow

router = APIRouter(prefix="/properties", tags=["properties"])


async def get_property_or_404(property_id: UUID, db: AsyncSession) -> Property:
    result = await db.execute(select(Property).where(Property.id == property_id))
    prop = result.scalar_one_or_none()
    if not prop:
        raise NotFoundError("Property", property_id)
    return prop


def to_property_response(prop: Property, rented: bool) -> PropertyResponse:
    response = PropertyResponse.model_validate(prop)
    response.is_rented = rented
    return response


@router.post("", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
async def create_property(
    data: PropertyCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_admin),
):
    """Create a new property (admin)."""
    prop = Property(
        owner_id=current_user.db_user_id,
        name=data.name,
        location=data.location,
        country=data.country,
        city=data.city,
        description=data.description,
        images=data.images,
    )
    db.add(prop)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateError(f"A property named '{data.name}' already exists")
    await db.refresh(prop)

    return to_property_response(prop, rented=False)


@router.get("", response_model=List[PropertyResponse])
async def list_properties(
    db: AsyncSession = Depends(get_db),
):
    """List properties with their current occupancy."""
    result = await db.execute(select(Property).order_by(Property.name))
    props = result.scalars().all()

    now = datetime.utcnow()
    intervals = await AvailabilityIndex(db).occupying_intervals(p.id for p in props)

    return [
        to_property_response(p, rented=is_occupied(intervals[p.id], now))
        for p in props
    ]


@router.get("/{property_id}", response_model=PropertyResponse)
async def get_property(
    property_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get a property by ID; ``is_rented`` is computed for the current instant."""
    prop = await get_property_or_404(property_id, db)
    rented = await AvailabilityIndex(db).is_occupied(prop.id, datetime.utcnow())
    return to_property_response(prop, rented)


@router.get("/{property_id}/rental-history", response_model=List[RentalIntervalResponse])
async def get_rental_history(
    property_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_admin),
):
    """Recorded rental intervals for a property, oldest first (admin)."""
    await get_property_or_404(property_id, db)
    return await AvailabilityIndex(db).history(property_id)


@router.get("/{property_id}/occupancy", response_model=OccupancyResponse)
async def get_occupancy(
    property_id: UUID,
    at: Optional[datetime] = None,
    db: AsyncSession = Depends(get_db),
    workflow: BookingWorkflow = Depends(get_booking_workflow),
):
    """Is the property occupied at ``at`` (defaults to now)."""
    await get_property_or_404(property_id, db)
    instant = to_naive_utc(at) if at else datetime.utcnow()
    occupied = await workflow.is_property_occupied(property_id, instant)
    return OccupancyResponse(property_id=property_id, at=instant, occupied=occupied)
