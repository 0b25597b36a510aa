"""Availability index: is a property occupied at a given instant.

Nothing is cached; every query is answered from the rental history rows and
the status of the rentals they belong to.
"""

from datetime import datetime
from typing import Iterable
from uuid import UUID

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import RentalStatus
from app.models.property import PropertyRentalInterval
from app.models.rental import Rental

# Pending and rejected requests do not block the property
OCCUPYING_STATUSES = (RentalStatus.APPROVED, RentalStatus.COMPLETED)


def interval_contains(start: datetime, end: datetime, instant: datetime) -> bool:
    """Closed-interval membership: ``start <= instant <= end``."""
    return start <= instant <= end


def is_occupied(intervals: Iterable[tuple[datetime, datetime]], instant: datetime) -> bool:
    """True iff ``instant`` falls inside any of ``intervals``."""
    return any(interval_contains(start, end, instant) for start, end in intervals)


class AvailabilityIndex:
    """Read-only occupancy queries over a property's rental history."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def history(self, property_id: UUID) -> list[PropertyRentalInterval]:
        """All recorded intervals for a property, oldest first."""
        result = await self.db.execute(
            select(PropertyRentalInterval)
            .where(PropertyRentalInterval.property_id == property_id)
            .order_by(PropertyRentalInterval.start_date)
        )
        return list(result.scalars().all())

    async def occupying_intervals(
        self, property_ids: Iterable[UUID]
    ) -> dict[UUID, list[tuple[datetime, datetime]]]:
        """Intervals of approved/completed rentals, grouped by property."""
        ids = list(property_ids)
        grouped: dict[UUID, list[tuple[datetime, datetime]]] = {pid: [] for pid in ids}
        if not ids:
            return grouped
        result = await self.db.execute(
            select(
                PropertyRentalInterval.property_id,
                PropertyRentalInterval.start_date,
                PropertyRentalInterval.end_date,
            )
            .join(Rental, Rental.id == PropertyRentalInterval.rental_id)
            .where(
                PropertyRentalInterval.property_id.in_(ids),
                Rental.status.in_(OCCUPYING_STATUSES),
            )
        )
        for row in result:
            grouped[row.property_id].append((row.start_date, row.end_date))
        return grouped

    async def is_occupied(self, property_id: UUID, instant: datetime) -> bool:
        """True iff an approved or completed rental covers ``instant``."""
        query = select(
            exists().where(
                PropertyRentalInterval.property_id == property_id,
                PropertyRentalInterval.rental_id == Rental.id,
                Rental.status.in_(OCCUPYING_STATUSES),
                PropertyRentalInterval.start_date <= instant,
                PropertyRentalInterval.end_date >= instant,
            )
        )
        result = await self.db.execute(query)
        return bool(result.scalar())
