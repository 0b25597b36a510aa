"""Services for the rental booking engine."""

from app.services.storage import StorageService, get_storage_service
from app.services.audit import AuditService
from app.services.availability import AvailabilityIndex
from app.services.rental_policy import RentalPolicyService
from app.services.booking_workflow import BookingWorkflow, get_booking_workflow

__all__ = [
    "StorageService",
    "get_storage_service",
    "AuditService",
    "AvailabilityIndex",
    "RentalPolicyService",
    "BookingWorkflow",
    "get_booking_workflow",
]
