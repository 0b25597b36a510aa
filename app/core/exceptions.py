"""Domain error taxonomy for the rental booking engine.

Services raise these; ``app.main`` renders them as JSON responses so that the
HTTP layer never has to translate errors by hand.
"""

from typing import Any, Optional

from fastapi import status


class RentalError(Exception):
    """Base class for all domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "rental_error"
    retryable: bool = False

    def __init__(self, detail: str, **context: Any):
        super().__init__(detail)
        self.detail = detail
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"detail": self.detail, "code": self.code}
        if self.retryable:
            body["retryable"] = True
        return body


class ValidationError(RentalError):
    """Malformed or out-of-range input."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class DurationError(ValidationError):
    """Booking length outside the configured bounds."""

    code = "invalid_duration"

    def __init__(self, span_days: int, min_days: int, max_days: int):
        super().__init__(
            f"Rental duration must be between {min_days} and {max_days} days",
            span_days=span_days,
        )
        self.span_days = span_days
        self.min_days = min_days
        self.max_days = max_days


class InvalidTransitionError(ValidationError):
    """Requested status change is not reachable from the current status."""

    code = "invalid_transition"


class DuplicateError(RentalError):
    """The (property, user, year) booking already exists."""

    status_code = status.HTTP_409_CONFLICT
    code = "duplicate_rental"


class ConflictError(DuplicateError):
    """A concurrent write won the uniqueness race after the pre-check passed."""

    retryable = True


class SettingConflictError(ConflictError):
    """Two first-time saves of the same location's rental setting collided."""

    code = "duplicate_rental_setting"


class ForbiddenError(RentalError):
    """Caller is not the owner of the booking or lacks the admin role."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"


class NotFoundError(RentalError):
    """Referenced rental or property does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"

    def __init__(self, resource: str, identifier: Optional[Any] = None):
        super().__init__(f"{resource} not found", identifier=identifier)
        self.resource = resource
