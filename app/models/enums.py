"""Enumeration types for the rental booking domain model."""

from enum import Enum


class UserRole(str, Enum):
    """Role of a platform user."""
    TENANT = "tenant"
    ADMIN = "admin"


class RentalStatus(str, Enum):
    """Lifecycle status of a rental booking."""
    PENDING = "pending"        # Requested, awaiting review
    APPROVED = "approved"      # Accepted by an administrator
    REJECTED = "rejected"      # Refused by an administrator (terminal)
    COMPLETED = "completed"    # Stay finished, evidence submitted (terminal)


class EvidenceKind(str, Enum):
    """Which side of the stay a condition photo documents."""
    BEFORE = "before"
    AFTER = "after"


class AuditAction(str, Enum):
    """Actions tracked in audit log."""
    RENTAL_CREATED = "rental_created"
    RENTAL_COMPLETED = "rental_completed"
    RENTAL_STATUS_CHANGED = "rental_status_changed"
    RENTAL_DELETED = "rental_deleted"
    RENTAL_SETTING_SAVED = "rental_setting_saved"
    RENTAL_SETTING_DELETED = "rental_setting_deleted"
