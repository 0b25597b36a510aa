"""Rental policy: booking length bounds and one-booking-per-year rule."""

import logging
import math
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import RentalPolicyConfig
from app.core.exceptions import DuplicateError, DurationError, ValidationError
from app.models.rental import Rental
from app.models.rental_setting import RentalSetting

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def rental_span_days(start: datetime, end: datetime) -> int:
    """Whole-day span of a booking, rounding partial days up."""
    return math.ceil((end - start) / ONE_DAY)


def validate_duration(
    start: datetime,
    end: datetime,
    config: RentalPolicyConfig,
) -> int:
    """Check the booking length against ``config`` and return the span in days.

    Raises:
        ValidationError: ``end`` is not after ``start``.
        DurationError: span outside ``[min_duration_days, max_duration_days]``.
    """
    if end <= start:
        raise ValidationError("end_date must be after start_date")

    span = rental_span_days(start, end)
    if span < config.min_duration_days or span > config.max_duration_days:
        raise DurationError(span, config.min_duration_days, config.max_duration_days)
    return span


def year_bounds(year: int) -> tuple[datetime, datetime]:
    """Half-open ``[Jan 1, Jan 1 of next year)`` window for a calendar year."""
    return datetime(year, 1, 1), datetime(year + 1, 1, 1)


class RentalPolicyService:
    """Policy checks that need the record store."""

    def __init__(self, db: AsyncSession, defaults: RentalPolicyConfig):
        self.db = db
        self.defaults = defaults

    async def resolve(self, country: Optional[str], city: Optional[str]) -> RentalPolicyConfig:
        """Duration bounds for a location.

        Looks for a (country, city) setting, then a country-wide one, and
        falls back to the configured defaults.
        """
        if country:
            candidates = [(country, city)] if city else []
            candidates.append((country, None))
            for cand_country, cand_city in candidates:
                query = select(RentalSetting).where(RentalSetting.country == cand_country)
                if cand_city is None:
                    query = query.where(RentalSetting.city.is_(None))
                else:
                    query = query.where(RentalSetting.city == cand_city)
                result = await self.db.execute(query)
                setting = result.scalar_one_or_none()
                if setting:
                    return RentalPolicyConfig(
                        min_duration_days=setting.min_duration,
                        max_duration_days=setting.max_duration,
                    )
        return self.defaults

    async def check_year_uniqueness(self, property_id: UUID, user_id: UUID, year: int) -> None:
        """Raise ``DuplicateError`` if the user already booked the property in ``year``.

        This is the optimistic pre-check; the unique constraint on
        (property_id, user_id, year) settles concurrent inserts.
        """
        year_start, next_year = year_bounds(year)
        result = await self.db.execute(
            select(Rental.id)
            .where(
                Rental.property_id == property_id,
                Rental.user_id == user_id,
                Rental.start_date >= year_start,
                Rental.start_date < next_year,
            )
            .limit(1)
        )
        if result.scalar_one_or_none() is not None:
            logger.info(
                f"[POLICY] Duplicate booking rejected: property={property_id} user={user_id} year={year}"
            )
            raise DuplicateError("You have already rented this property this year")
