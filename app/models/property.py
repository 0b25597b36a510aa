"""Property and rental history models.

Properties belong to the catalog; the booking engine only appends to and reads
from ``property_rental_history``.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import JSON, String, DateTime, ForeignKey, Text, Uuid, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.rental import Rental
    from app.models.user import User


class Property(Base):
    """A rentable property listed in the catalog."""

    __tablename__ = "properties"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    owner_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Used to resolve the rental policy (country, then country + city)
    country: Mapped[str] = mapped_column(String(100), nullable=False)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    images: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    rental_history: Mapped[list["PropertyRentalInterval"]] = relationship(
        "PropertyRentalInterval", back_populates="property", cascade="all, delete-orphan"
    )
    rentals: Mapped[list["Rental"]] = relationship(
        "Rental", back_populates="property", cascade="all, delete-orphan"
    )


class PropertyRentalInterval(Base):
    """One booked interval in a property's rental history.

    Written in the same transaction as the rental it mirrors and removed with it.
    """

    __tablename__ = "property_rental_history"

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
    rental_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("rentals.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    member_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    property: Mapped["Property"] = relationship("Property", back_populates="rental_history")
    rental: Mapped["Rental"] = relationship("Rental", back_populates="history_entry")
    member: Mapped[Optional["User"]] = relationship("User")

    __table_args__ = (
        CheckConstraint("start_date < end_date", name="ck_rental_history_dates"),
    )
