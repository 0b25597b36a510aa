"""Audit logging service."""

from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.audit import AuditLog
from app.models.enums import AuditAction, RentalStatus
from app.models.rental import Rental


class AuditService:
    """Service for creating audit log entries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def log(
        self,
        action: AuditAction,
        resource_type: str,
        resource_id: UUID,
        user_id: Optional[UUID] = None,
        details: Optional[dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AuditLog:
        """Create an audit log entry."""
        entry = AuditLog(
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            user_id=user_id,
            details=details or {},
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def log_rental_created(
        self,
        rental: Rental,
        ip_address: Optional[str] = None,
    ) -> AuditLog:
        """Log booking request."""
        return await self.log(
            action=AuditAction.RENTAL_CREATED,
            resource_type="rental",
            resource_id=rental.id,
            user_id=rental.user_id,
            details={
                "property_id": str(rental.property_id),
                "start_date": rental.start_date.isoformat(),
                "end_date": rental.end_date.isoformat(),
                "year": rental.year,
            },
            ip_address=ip_address,
        )

    async def log_rental_completed(
        self,
        rental: Rental,
        ip_address: Optional[str] = None,
    ) -> AuditLog:
        """Log evidence submission and completion."""
        return await self.log(
            action=AuditAction.RENTAL_COMPLETED,
            resource_type="rental",
            resource_id=rental.id,
            user_id=rental.user_id,
            details={
                "before_pictures": len(rental.before_pictures),
                "after_pictures": len(rental.after_pictures),
            },
            ip_address=ip_address,
        )

    async def log_status_changed(
        self,
        rental: Rental,
        previous: RentalStatus,
        actor_id: Optional[UUID],
        ip_address: Optional[str] = None,
    ) -> AuditLog:
        """Log administrative status change."""
        return await self.log(
            action=AuditAction.RENTAL_STATUS_CHANGED,
            resource_type="rental",
            resource_id=rental.id,
            user_id=actor_id,
            details={"from": previous.value, "to": RentalStatus(rental.status).value},
            ip_address=ip_address,
        )

    async def log_rental_deleted(
        self,
        rental: Rental,
        actor_id: Optional[UUID],
        ip_address: Optional[str] = None,
    ) -> AuditLog:
        """Log administrative hard delete."""
        return await self.log(
            action=AuditAction.RENTAL_DELETED,
            resource_type="rental",
            resource_id=rental.id,
            user_id=actor_id,
            details={
                "property_id": str(rental.property_id),
                "tenant_id": str(rental.user_id),
                "status": RentalStatus(rental.status).value,
            },
            ip_address=ip_address,
        )
