"""Rental status state machine.

    pending  -> approved | rejected | completed
    approved -> completed

``rejected`` and ``completed`` are terminal. Every transition validates the
evidence the *target* status requires before any field is written, so a
refused transition leaves the rental untouched.
"""

from datetime import datetime
from typing import Optional, Sequence

from app.core.exceptions import InvalidTransitionError, ValidationError
from app.models.enums import RentalStatus
from app.models.rental import Rental

TRANSITIONS: dict[RentalStatus, frozenset[RentalStatus]] = {
    RentalStatus.PENDING: frozenset(
        {RentalStatus.APPROVED, RentalStatus.REJECTED, RentalStatus.COMPLETED}
    ),
    RentalStatus.APPROVED: frozenset({RentalStatus.COMPLETED}),
    RentalStatus.REJECTED: frozenset(),
    RentalStatus.COMPLETED: frozenset(),
}

# Statuses an administrator may request through setBookingStatus
ADMIN_SETTABLE = frozenset({RentalStatus.APPROVED, RentalStatus.REJECTED, RentalStatus.COMPLETED})

TERMINAL = frozenset(status for status, targets in TRANSITIONS.items() if not targets)


def parse_admin_status(value: str) -> RentalStatus:
    """Map a raw status string onto one an administrator may set."""
    try:
        target = RentalStatus(value)
    except ValueError:
        target = None
    if target not in ADMIN_SETTABLE:
        allowed = ", ".join(sorted(s.value for s in ADMIN_SETTABLE))
        raise ValidationError(f"Invalid status '{value}'. Must be one of: {allowed}")
    return target


def can_transition(current: RentalStatus, target: RentalStatus) -> bool:
    return target in TRANSITIONS[current]


def check_evidence(
    status: RentalStatus,
    before_pictures: Sequence[str],
    after_pictures: Sequence[str],
) -> None:
    """Raise ``ValidationError`` unless the evidence satisfies ``status``."""
    if status in (RentalStatus.PENDING, RentalStatus.APPROVED) and not before_pictures:
        raise ValidationError("Before pictures are required during rental creation or approval")
    if status == RentalStatus.COMPLETED and not after_pictures:
        raise ValidationError("After pictures are required when rental status is completed")


def transition(
    rental: Rental,
    target: RentalStatus,
    *,
    before_pictures: Optional[Sequence[str]] = None,
    after_pictures: Optional[Sequence[str]] = None,
    condition_report: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Rental:
    """Move ``rental`` to ``target``, replacing evidence where given."""
    current = RentalStatus(rental.status)
    if not can_transition(current, target):
        raise InvalidTransitionError(
            f"Cannot change rental status from {current.value} to {target.value}"
        )

    before = list(before_pictures) if before_pictures is not None else list(rental.before_pictures or [])
    after = list(after_pictures) if after_pictures is not None else list(rental.after_pictures or [])
    check_evidence(target, before, after)

    rental.before_pictures = before
    rental.after_pictures = after
    if condition_report is not None:
        rental.condition_report = condition_report
    rental.status = target
    if target == RentalStatus.COMPLETED:
        rental.completed_at = now or datetime.utcnow()
    return rental
