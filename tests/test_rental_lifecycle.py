from datetime import datetime

import pytest

from app.core.exceptions import InvalidTransitionError, ValidationError
from app.models import Rental
from app.models.enums import RentalStatus
from app.services.rental_lifecycle import (
    TERMINAL,
    can_transition,
    check_evidence,
    parse_admin_status,
    transition,
)


def make_rental(status=RentalStatus.PENDING, before=("before/1.jpg",), after=()):
    return Rental(
        start_date=datetime(2025, 6, 1),
        end_date=datetime(2025, 6, 5),
        year=2025,
        status=status,
        before_pictures=list(before),
        after_pictures=list(after),
    )


def test_terminal_states():
    assert TERMINAL == {RentalStatus.REJECTED, RentalStatus.COMPLETED}


@pytest.mark.parametrize(
    "current, target, allowed",
    [
        (RentalStatus.PENDING, RentalStatus.APPROVED, True),
        (RentalStatus.PENDING, RentalStatus.REJECTED, True),
        (RentalStatus.PENDING, RentalStatus.COMPLETED, True),
        (RentalStatus.APPROVED, RentalStatus.COMPLETED, True),
        (RentalStatus.APPROVED, RentalStatus.REJECTED, False),
        (RentalStatus.APPROVED, RentalStatus.PENDING, False),
        (RentalStatus.REJECTED, RentalStatus.APPROVED, False),
        (RentalStatus.COMPLETED, RentalStatus.APPROVED, False),
    ],
)
def test_can_transition(current, target, allowed):
    assert can_transition(current, target) is allowed


@pytest.mark.parametrize("value", ["approved", "rejected", "completed"])
def test_parse_admin_status_accepts(value):
    assert parse_admin_status(value) == RentalStatus(value)


@pytest.mark.parametrize("value", ["pending", "archived", "APPROVED", ""])
def test_parse_admin_status_rejects(value):
    with pytest.raises(ValidationError, match="Must be one of: approved, completed, rejected"):
        parse_admin_status(value)


def test_pending_needs_before_pictures():
    with pytest.raises(ValidationError, match="Before pictures are required"):
        check_evidence(RentalStatus.PENDING, [], [])


def test_completed_needs_after_pictures():
    with pytest.raises(ValidationError, match="After pictures are required"):
        check_evidence(RentalStatus.COMPLETED, ["b.jpg"], [])


def test_rejected_needs_nothing():
    check_evidence(RentalStatus.REJECTED, [], [])


def test_approve_keeps_evidence():
    rental = transition(make_rental(), RentalStatus.APPROVED)
    assert rental.status == RentalStatus.APPROVED
    assert rental.before_pictures == ["before/1.jpg"]
    assert rental.completed_at is None


def test_complete_replaces_evidence_and_stamps_time():
    now = datetime(2025, 6, 5, 12)
    rental = transition(
        make_rental(status=RentalStatus.APPROVED),
        RentalStatus.COMPLETED,
        before_pictures=["b1.jpg", "b2.jpg"],
        after_pictures=["a1.jpg"],
        condition_report="Scratch on the table",
        now=now,
    )
    assert rental.status == RentalStatus.COMPLETED
    assert rental.before_pictures == ["b1.jpg", "b2.jpg"]
    assert rental.after_pictures == ["a1.jpg"]
    assert rental.condition_report == "Scratch on the table"
    assert rental.completed_at == now


def test_refused_completion_leaves_rental_untouched():
    rental = make_rental()
    with pytest.raises(ValidationError):
        transition(rental, RentalStatus.COMPLETED, before_pictures=["new.jpg"])
    assert rental.status == RentalStatus.PENDING
    assert rental.before_pictures == ["before/1.jpg"]


def test_terminal_rental_cannot_move():
    rental = make_rental(status=RentalStatus.REJECTED)
    with pytest.raises(InvalidTransitionError, match="from rejected to approved"):
        transition(rental, RentalStatus.APPROVED)
    assert rental.status == RentalStatus.REJECTED
