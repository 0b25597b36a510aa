"""Per-location rental policy configuration."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, DateTime, Integer, Uuid, CheckConstraint, Index, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class RentalSetting(Base):
    """Allowed booking length for a country, optionally narrowed to a city."""

    __tablename__ = "rental_settings"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    country: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    min_duration: Mapped[int] = mapped_column(Integer, nullable=False)
    max_duration: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    __table_args__ = (
        UniqueConstraint("country", "city", name="uq_rental_settings_location"),
        # NULL cities are distinct to the constraint above; one country-wide row per country.
        Index(
            "uq_rental_settings_country_wide",
            "country",
            unique=True,
            postgresql_where=text("city IS NULL"),
            sqlite_where=text("city IS NULL"),
        ),
        CheckConstraint("min_duration >= 3", name="ck_rental_settings_min"),
        CheckConstraint("max_duration <= 7", name="ck_rental_settings_max"),
        CheckConstraint("min_duration <= max_duration", name="ck_rental_settings_range"),
    )
