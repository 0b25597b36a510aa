"""SQLAlchemy models for the rental booking engine."""

from app.models.user import User
from app.models.property import Property, PropertyRentalInterval
from app.models.rental import Rental
from app.models.rental_setting import RentalSetting
from app.models.audit import AuditLog

__all__ = [
    "User",
    "Property",
    "PropertyRentalInterval",
    "Rental",
    "RentalSetting",
    "AuditLog",
]
