"""Rental (booking) model."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
    inspect,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.enums import RentalStatus

if TYPE_CHECKING:
    from app.models.property import Property, PropertyRentalInterval
    from app.models.user import User


class Rental(Base):
    """One booking of a property by a user over a date range.

    A user may book a given property at most once per calendar year; the
    (property_id, user_id, year) constraint enforces this at the storage layer.
    ``year`` is fixed from ``start_date`` at creation and never reassigned.
    """

    __tablename__ = "rentals"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Dates
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[RentalStatus] = mapped_column(
        SQLEnum(RentalStatus, values_callable=lambda e: [m.value for m in e]),
        default=RentalStatus.PENDING,
        nullable=False,
        index=True,
    )

    # Evidence (ordered object paths in the evidence bucket)
    before_pictures: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    after_pictures: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    condition_report: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Must precede the ``property`` relationship, which shadows the builtin below.
    @property
    def property_name(self) -> Optional[str]:
        """Name of the booked property, or None when the relationship is not loaded."""
        if "property" in inspect(self).unloaded:
            return None
        return self.property.name if self.property else None

    # Relationships
    property: Mapped["Property"] = relationship("Property", back_populates="rentals")
    user: Mapped["User"] = relationship("User", back_populates="rentals")
    history_entry: Mapped[Optional["PropertyRentalInterval"]] = relationship(
        "PropertyRentalInterval",
        back_populates="rental",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False,
    )

    __table_args__ = (
        UniqueConstraint("property_id", "user_id", "year", name="uq_rentals_property_user_year"),
        CheckConstraint("start_date < end_date", name="ck_rentals_dates"),
    )
