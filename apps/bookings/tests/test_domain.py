"""Unit tests for the booking aggregate and its status lifecycle."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from apps.bookings.domain.entities import Booking, BookingStatus, parse_review
from apps.bookings.domain.events import (
    BookingApproved,
    BookingCancelled,
    BookingRejected,
    BookingSubmitted,
)
from apps.bookings.exceptions import BookingValidationError, InvalidTransitionError
from shared.domain.value_objects import StayDates

NOW = datetime(2025, 5, 20, 10, 0, tzinfo=timezone.utc)


def make_booking(**overrides) -> Booking:
    data = dict(
        name="A. Singh",
        email="a@x.com",
        phone="+91 98160 00000",
        address="Summer Hill, Shimla",
        check_in=date(2025, 6, 1),
        check_out=date(2025, 6, 3),
        guest_count=2,
        submitted_at=NOW,
    )
    data.update(overrides)
    return Booking.submit("HPU-0ABC-12345", **data)


def test_submit_creates_pending_booking_with_event():
    booking = make_booking()

    assert booking.status is BookingStatus.PENDING
    assert booking.nights == 2
    assert booking.version == 1
    events = booking.pull_events()
    assert [type(e) for e in events] == [BookingSubmitted]
    assert events[0].application_id == "HPU-0ABC-12345"
    assert events[0].applicant_email == "a@x.com"
    assert events[0].check_in == date(2025, 6, 1)
    assert booking.pull_events() == []


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"check_out": date(2025, 6, 1)}, "check_out"),
        ({"check_out": date(2025, 5, 30)}, "check_out"),
        ({"guest_count": 0}, "guest_count"),
        ({"guest_count": 11}, "guest_count"),
        ({"email": "not-an-email"}, "email"),
        ({"name": "   "}, "name"),
        ({"purpose": "holiday"}, "purpose"),
        ({"id_proof": "library_card"}, "id_proof"),
    ],
)
def test_submit_rejects_invalid_input(overrides, field):
    with pytest.raises(BookingValidationError) as excinfo:
        make_booking(**overrides)

    assert field in excinfo.value.errors


def test_submit_reports_all_problems_together():
    with pytest.raises(BookingValidationError) as excinfo:
        make_booking(name="", phone="", guest_count=42)

    assert {"name", "phone", "guest_count"} <= set(excinfo.value.errors)


def test_approve_moves_pending_to_approved():
    booking = make_booking()
    booking.pull_events()

    assert booking.approve(NOW) is True
    assert booking.status is BookingStatus.APPROVED
    assert booking.rejection_reason == ""
    assert booking.status_changed_at == NOW
    assert booking.version == 2
    assert [type(e) for e in booking.pull_events()] == [BookingApproved]


def test_reject_requires_reason_and_records_it():
    booking = make_booking()
    booking.pull_events()

    with pytest.raises(BookingValidationError):
        booking.reject("  ", NOW)
    assert booking.status is BookingStatus.PENDING

    assert booking.reject("Dates unavailable", NOW) is True
    assert booking.rejection_reason == "Dates unavailable"
    events = booking.pull_events()
    assert isinstance(events[0], BookingRejected)
    assert events[0].reason == "Dates unavailable"


def test_same_status_is_a_noop():
    booking = make_booking()
    booking.approve(NOW)
    booking.pull_events()

    assert booking.approve(NOW) is False
    assert booking.version == 2
    assert booking.pull_events() == []


@pytest.mark.parametrize("terminal", [BookingStatus.APPROVED, BookingStatus.REJECTED, BookingStatus.CANCELLED])
def test_terminal_statuses_do_not_move(terminal):
    assert terminal.is_terminal
    booking = make_booking()
    booking.status = terminal

    if terminal is not BookingStatus.APPROVED:
        with pytest.raises(InvalidTransitionError):
            booking.approve(NOW)
    if terminal is not BookingStatus.REJECTED:
        with pytest.raises(InvalidTransitionError):
            booking.reject("Dates unavailable", NOW)
    if terminal is not BookingStatus.CANCELLED:
        with pytest.raises(InvalidTransitionError):
            booking.cancel(NOW)
    assert booking.status is terminal
    assert booking.version == 1


def test_cancel_from_pending_emits_event():
    booking = make_booking()
    booking.pull_events()

    assert booking.cancel(NOW) is True
    assert booking.status is BookingStatus.CANCELLED
    assert [type(e) for e in booking.pull_events()] == [BookingCancelled]


class TestParseReview:
    def test_statuses_are_case_insensitive(self):
        assert parse_review("approved", None) == (BookingStatus.APPROVED, "")
        assert parse_review("REJECTED", " full ") == (BookingStatus.REJECTED, "full")

    def test_only_review_targets_allowed(self):
        for value in ("Pending", "Cancelled", "Archived"):
            with pytest.raises(BookingValidationError) as excinfo:
                parse_review(value, None)
            assert "status" in excinfo.value.errors

    def test_reason_rules(self):
        with pytest.raises(BookingValidationError):
            parse_review("Rejected", None)
        with pytest.raises(BookingValidationError):
            parse_review("Approved", "looks fine")


def test_stay_dates_require_check_out_after_check_in():
    assert StayDates(date(2025, 6, 1), date(2025, 6, 4)).nights == 3
    with pytest.raises(ValueError):
        StayDates(date(2025, 6, 4), date(2025, 6, 4))
    with pytest.raises(TypeError):
        StayDates("2025-06-01", date(2025, 6, 4))
