"""Rental settings router - per-location booking length bounds (admin)."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import NotFoundError, SettingConflictError
from app.core.security import AuthenticatedUser, require_admin
from app.models.enums import AuditAction
from app.models.rental_setting import RentalSetting
from app.schemas.rental_setting import RentalSettingResponse, RentalSettingUpsert
from app.services.audit import AuditService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rental-settings", tags=["rental-settings"])


@router.get("", response_model=List[RentalSettingResponse])
async def list_rental_settings(
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_admin),
):
    """List configured bounds by location."""
    result = await db.execute(
        select(RentalSetting).order_by(RentalSetting.country, RentalSetting.city)
    )
    return result.scalars().all()


async def find_setting(db: AsyncSession, country: str, city: Optional[str]) -> Optional[RentalSetting]:
    """Row for exactly (country, city), locked for the upsert."""
    query = select(RentalSetting).where(RentalSetting.country == country)
    if city is None:
        query = query.where(RentalSetting.city.is_(None))
    else:
        query = query.where(RentalSetting.city == city)
    result = await db.execute(query.with_for_update())
    return result.scalar_one_or_none()


@router.put("", response_model=RentalSettingResponse)
async def upsert_rental_setting(
    data: RentalSettingUpsert,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_admin),
):
    """Create or replace the bounds for (country, city).

    Two first-time saves for the same location race on the unique index; the
    loser gets a retryable 409.
    """
    setting = await find_setting(db, data.country, data.city)

    if setting:
        setting.min_duration = data.min_duration
        setting.max_duration = data.max_duration
    else:
        setting = RentalSetting(
            country=data.country,
            city=data.city,
            min_duration=data.min_duration,
            max_duration=data.max_duration,
        )
        db.add(setting)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        logger.warning(
            f"[POLICY] Concurrent rental setting save for country={data.country} city={data.city}"
        )
        raise SettingConflictError("A rental setting for this location was saved concurrently; retry")

    audit = AuditService(db)
    await audit.log(
        action=AuditAction.RENTAL_SETTING_SAVED,
        resource_type="rental_setting",
        resource_id=setting.id,
        user_id=current_user.db_user_id,
        details={
            "country": data.country,
            "city": data.city,
            "min_duration": data.min_duration,
            "max_duration": data.max_duration,
        },
        ip_address=request.client.host if request.client else None,
    )

    await db.commit()
    await db.refresh(setting)
    return setting


@router.delete("/{setting_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rental_setting(
    setting_id: UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_admin),
):
    """Remove a location override; bookings fall back to broader settings."""
    result = await db.execute(select(RentalSetting).where(RentalSetting.id == setting_id))
    setting = result.scalar_one_or_none()
    if not setting:
        raise NotFoundError("Rental setting", setting_id)

    audit = AuditService(db)
    await audit.log(
        action=AuditAction.RENTAL_SETTING_DELETED,
        resource_type="rental_setting",
        resource_id=setting.id,
        user_id=current_user.db_user_id,
        details={"country": setting.country, "city": setting.city},
        ip_address=request.client.host if request.client else None,
    )
    await db.delete(setting)
    await db.commit()
