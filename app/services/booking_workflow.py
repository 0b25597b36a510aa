"""Booking workflow: create, complete, review and delete rentals.

Each public method is one transaction. Policy checks run first; nothing is
written unless every check passes, and the rental row, its rental-history
interval and the audit entry are committed together.
"""

import logging
from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

from fastapi import Depends
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import RentalPolicyConfig, get_settings
from app.core.database import get_db
from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.models.enums import RentalStatus
from app.models.property import Property, PropertyRentalInterval
from app.models.rental import Rental
from app.services import rental_lifecycle
from app.services.audit import AuditService
from app.services.availability import AvailabilityIndex
from app.services.rental_policy import RentalPolicyService, validate_duration

logger = logging.getLogger(__name__)


class BookingWorkflow:
    """Orchestrates the rental lifecycle against the record store."""

    def __init__(
        self,
        db: AsyncSession,
        policy_defaults: RentalPolicyConfig,
        max_pictures: int = 20,
    ):
        self.db = db
        self.policy = RentalPolicyService(db, policy_defaults)
        self.availability = AvailabilityIndex(db)
        self.audit = AuditService(db)
        self.max_pictures = max_pictures

    # === Helpers ===

    def _check_picture_count(self, label: str, pictures: Sequence[str]) -> None:
        if len(pictures) > self.max_pictures:
            raise ValidationError(f"At most {self.max_pictures} {label} pictures are allowed")

    async def _get_property(
        self,
        property_id: Optional[UUID] = None,
        property_name: Optional[str] = None,
    ) -> Property:
        if property_id is not None:
            query = select(Property).where(Property.id == property_id)
        elif property_name:
            query = select(Property).where(Property.name == property_name)
        else:
            raise ValidationError("property_id or property_name is required")

        result = await self.db.execute(query)
        prop = result.scalar_one_or_none()
        if not prop:
            raise NotFoundError("Property", property_id or property_name)
        return prop

    async def _load(self, rental_id: UUID, for_update: bool = False) -> Rental:
        query = (
            select(Rental)
            .options(selectinload(Rental.property))
            .where(Rental.id == rental_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            query = query.with_for_update(of=Rental)
        result = await self.db.execute(query)
        rental = result.scalar_one_or_none()
        if not rental:
            raise NotFoundError("Rental", rental_id)
        return rental

    async def _year_taken(self, property_id: UUID, user_id: UUID, year: int) -> bool:
        result = await self.db.execute(
            select(Rental.id).where(
                Rental.property_id == property_id,
                Rental.user_id == user_id,
                Rental.year == year,
            )
        )
        return result.first() is not None

    # === Operations ===

    async def create_booking(
        self,
        user_id: UUID,
        start_date: datetime,
        end_date: datetime,
        before_pictures: Sequence[str],
        property_id: Optional[UUID] = None,
        property_name: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Rental:
        """Create a pending rental after duration and yearly-uniqueness checks.

        Raises:
            ValidationError / DurationError: bad dates, length or evidence.
            NotFoundError: the property does not exist.
            DuplicateError: the user already booked this property this year.
            ConflictError: a concurrent request for the same year won the insert.
        """
        pictures = list(before_pictures)
        self._check_picture_count("before", pictures)
        rental_lifecycle.check_evidence(RentalStatus.PENDING, pictures, [])

        prop = await self._get_property(property_id, property_name)
        config = await self.policy.resolve(prop.country, prop.city)
        validate_duration(start_date, end_date, config)

        # Rollback expires loaded instances; keep the key as a plain value.
        prop_id = prop.id
        year = start_date.year
        await self.policy.check_year_uniqueness(prop_id, user_id, year)

        rental = Rental(
            property_id=prop_id,
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
            year=year,
            status=RentalStatus.PENDING,
            before_pictures=pictures,
            after_pictures=[],
            created_at=datetime.utcnow(),
        )
        self.db.add(rental)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            if await self._year_taken(prop_id, user_id, year):
                logger.warning(
                    f"[RENTALS] Concurrent booking lost uniqueness race: "
                    f"property={prop_id} user={user_id} year={year}"
                )
                raise ConflictError(
                    "You have already rented this property this year (concurrent request); retry to see the current state"
                )
            raise

        self.db.add(
            PropertyRentalInterval(
                property_id=prop_id,
                rental_id=rental.id,
                member_id=user_id,
                start_date=start_date,
                end_date=end_date,
            )
        )
        await self.audit.log_rental_created(rental, ip_address=ip_address)
        await self.db.commit()

        logger.info(f"[RENTALS] Created rental {rental.id} for property={prop_id} user={user_id}")
        return await self._load(rental.id)

    async def complete_booking(
        self,
        rental_id: UUID,
        requester_id: UUID,
        before_pictures: Sequence[str],
        after_pictures: Sequence[str],
        condition_report: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Rental:
        """Attach check-in/check-out evidence and mark the rental completed."""
        rental = await self._load(rental_id, for_update=True)

        if rental.user_id != requester_id:
            raise ForbiddenError("Not authorized to complete this rental")

        before = list(before_pictures)
        after = list(after_pictures)
        if not before or not after:
            raise ValidationError("Both before and after pictures are required")
        self._check_picture_count("before", before)
        self._check_picture_count("after", after)

        rental_lifecycle.transition(
            rental,
            RentalStatus.COMPLETED,
            before_pictures=before,
            after_pictures=after,
            condition_report=condition_report or "",
        )
        await self.audit.log_rental_completed(rental, ip_address=ip_address)
        await self.db.commit()

        logger.info(f"[RENTALS] Rental {rental_id} completed by user={requester_id}")
        return await self._load(rental_id)

    async def get_booking(self, rental_id: UUID, requester_id: UUID, is_admin: bool = False) -> Rental:
        rental = await self._load(rental_id)
        if not is_admin and rental.user_id != requester_id:
            raise ForbiddenError("Not authorized to view this rental")
        return rental

    async def list_my_bookings(self, user_id: UUID) -> list[Rental]:
        """The caller's rentals, newest first."""
        result = await self.db.execute(
            select(Rental)
            .options(selectinload(Rental.property))
            .where(Rental.user_id == user_id)
            .order_by(Rental.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_all_bookings(self) -> list[Rental]:
        """Every rental, newest first (administrative)."""
        result = await self.db.execute(
            select(Rental)
            .options(selectinload(Rental.property))
            .order_by(Rental.created_at.desc())
        )
        return list(result.scalars().all())

    async def set_booking_status(
        self,
        rental_id: UUID,
        new_status: str,
        actor_id: Optional[UUID] = None,
        ip_address: Optional[str] = None,
    ) -> Rental:
        """Administrative status change along the state machine.

        No evidence is attached here, so ``completed`` raises ``ValidationError``
        unless the rental already carries after-pictures; see ``complete_booking``.
        """
        target = rental_lifecycle.parse_admin_status(new_status)
        rental = await self._load(rental_id, for_update=True)
        previous = RentalStatus(rental.status)

        rental_lifecycle.transition(rental, target)
        await self.audit.log_status_changed(rental, previous, actor_id, ip_address=ip_address)
        await self.db.commit()

        logger.info(f"[RENTALS] Rental {rental_id} status {previous.value} -> {target.value}")
        return await self._load(rental_id)

    async def delete_booking(
        self,
        rental_id: UUID,
        actor_id: Optional[UUID] = None,
        ip_address: Optional[str] = None,
    ) -> None:
        """Hard delete a rental together with its rental-history interval.

        Evidence files are left in storage.
        """
        rental = await self._load(rental_id, for_update=True)
        await self.audit.log_rental_deleted(rental, actor_id, ip_address=ip_address)

        await self.db.execute(
            delete(PropertyRentalInterval).where(PropertyRentalInterval.rental_id == rental_id)
        )
        await self.db.execute(delete(Rental).where(Rental.id == rental_id))
        await self.db.commit()

        logger.info(f"[RENTALS] Rental {rental_id} deleted by admin={actor_id}")

    async def is_property_occupied(self, property_id: UUID, instant: datetime) -> bool:
        return await self.availability.is_occupied(property_id, instant)


def get_booking_workflow(db: AsyncSession = Depends(get_db)) -> BookingWorkflow:
    """FastAPI dependency building a workflow bound to the request session."""
    settings = get_settings()
    return BookingWorkflow(
        db,
        settings.rental_policy,
        max_pictures=settings.rental_max_pictures,
    )
