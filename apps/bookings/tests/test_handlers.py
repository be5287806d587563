"""Tests for the booking use cases against the database."""

from __future__ import annotations

from datetime import date
from unittest import mock

import pytest
from django.db import DatabaseError, IntegrityError, connection

from apps.bookings.application.command_handlers import (
    CancelBookingCommand,
    CancelBookingHandler,
    SubmitBookingCommand,
    SubmitBookingHandler,
    TransitionBookingCommand,
    TransitionBookingHandler,
)
from apps.bookings.application.queries import booking_stats, list_bookings, lookup_status
from apps.bookings.domain.entities import BookingStatus
from apps.bookings.domain.events import BookingApproved, BookingRejected, BookingSubmitted
from apps.bookings.exceptions import (
    BookingValidationError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    StaleBookingError,
)
from apps.bookings.models import Booking, StatusLookup
from apps.bookings.repositories import DjangoBookingRepository
from shared.application.message_bus import MessageBus


def submit_command(**overrides) -> SubmitBookingCommand:
    data = dict(
        name="A. Singh",
        email="a@x.com",
        phone="+91 98160 00000",
        address="Summer Hill, Shimla",
        check_in=date(2025, 6, 1),
        check_out=date(2025, 6, 3),
        guest_count=2,
        id_number="1234 5678 9012",
    )
    data.update(overrides)
    return SubmitBookingCommand(**data)


@pytest.fixture
def recording_bus():
    bus = MessageBus()
    bus.seen = []
    for event_type in (BookingSubmitted, BookingApproved, BookingRejected):
        bus.register_event_handler(event_type, bus.seen.append)
    return bus


def assert_pairs_consistent():
    bookings = dict(Booking.objects.values_list("application_id", "status"))
    lookups = dict(StatusLookup.objects.values_list("application_id", "status"))
    assert bookings == lookups


def submit(**overrides):
    return SubmitBookingHandler(DjangoBookingRepository()).handle(submit_command(**overrides))


def transition(application_id, status, reason=None, version=None):
    command = TransitionBookingCommand(application_id, status, reason=reason, expected_version=version)
    return TransitionBookingHandler(DjangoBookingRepository()).handle(command)


@pytest.mark.django_db
class TestSubmit:
    def test_writes_booking_and_status_record_together(self):
        booking = submit()

        row = Booking.objects.get(application_id=booking.application_id)
        lookup = StatusLookup.objects.get(application_id=booking.application_id)
        assert row.status == lookup.status == "Pending"
        assert lookup.check_in == row.check_in == date(2025, 6, 1)
        assert row.namespace == lookup.namespace == "guesthouse-test"
        assert lookup_status(booking.application_id).status is BookingStatus.PENDING

    def test_invalid_input_never_reaches_the_store(self):
        with mock.patch.object(Booking.objects, "create") as create:
            with pytest.raises(BookingValidationError):
                submit(check_out=date(2025, 6, 1))
        create.assert_not_called()

    def test_failed_status_write_leaves_nothing_behind(self, django_capture_on_commit_callbacks, recording_bus):
        handler = SubmitBookingHandler(DjangoBookingRepository(), bus=recording_bus)

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with mock.patch.object(StatusLookup.objects, "create", side_effect=DatabaseError("disk I/O error")):
                with pytest.raises(PersistenceError):
                    handler.handle(submit_command())

        assert Booking.objects.count() == 0
        assert StatusLookup.objects.count() == 0
        assert callbacks == []
        assert recording_bus.seen == []

        # The same request goes through once the store recovers
        with django_capture_on_commit_callbacks(execute=True):
            booking = handler.handle(submit_command())
        assert Booking.objects.count() == 1
        assert StatusLookup.objects.get().application_id == booking.application_id
        assert [type(e) for e in recording_bus.seen] == [BookingSubmitted]

    def test_duplicate_id_is_retried_with_a_fresh_one(self):
        ids = iter(["HPU-0000-AAAAA", "HPU-0000-AAAAA", "HPU-0000-BBBBB"])
        handler = SubmitBookingHandler(DjangoBookingRepository(), id_generator=lambda: next(ids))

        first = handler.handle(submit_command())
        second = handler.handle(submit_command(email="b@x.com"))

        assert first.application_id == "HPU-0000-AAAAA"
        assert second.application_id == "HPU-0000-BBBBB"
        assert Booking.objects.count() == StatusLookup.objects.count() == 2
        assert_pairs_consistent()

    def test_gives_up_after_configured_attempts(self):
        handler = SubmitBookingHandler(
            DjangoBookingRepository(), id_generator=lambda: "HPU-0000-AAAAA", max_attempts=2
        )
        handler.handle(submit_command())

        with pytest.raises(PersistenceError):
            handler.handle(submit_command())
        assert Booking.objects.count() == 1

    def test_other_integrity_errors_are_not_retried(self):
        drawn = []

        def next_id():
            drawn.append(f"HPU-0000-{len(drawn):05d}")
            return drawn[-1]

        handler = SubmitBookingHandler(DjangoBookingRepository(), id_generator=next_id, max_attempts=3)

        with mock.patch.object(
            StatusLookup.objects, "create", side_effect=IntegrityError("NOT NULL constraint failed: status")
        ):
            with pytest.raises(PersistenceError) as excinfo:
                handler.handle(submit_command())

        assert drawn == ["HPU-0000-00000"]
        assert "unique application ID" not in excinfo.value.message
        assert Booking.objects.count() == StatusLookup.objects.count() == 0

    def test_id_number_is_encrypted_at_rest(self):
        booking = submit()

        with connection.cursor() as cursor:
            cursor.execute(
                f"SELECT id_number FROM {Booking._meta.db_table} WHERE application_id = %s",
                [booking.application_id],
            )
            (raw,) = cursor.fetchone()
        assert raw != "1234 5678 9012"
        assert Booking.objects.get().id_number == "1234 5678 9012"


@pytest.mark.django_db
class TestTransition:
    def test_approve_updates_both_records(self):
        booking = submit()

        result = transition(booking.application_id, "Approved")

        assert result.status is BookingStatus.APPROVED
        assert lookup_status(booking.application_id).status is BookingStatus.APPROVED
        row = Booking.objects.get()
        assert row.version == 2
        assert row.status_changed_at is not None
        assert_pairs_consistent()

    def test_reject_keeps_reason_private(self):
        booking = submit()

        with pytest.raises(BookingValidationError):
            transition(booking.application_id, "Rejected")
        transition(booking.application_id, "Rejected", reason="Dates unavailable")

        assert Booking.objects.get().rejection_reason == "Dates unavailable"
        assert not hasattr(lookup_status(booking.application_id), "rejection_reason")
        assert_pairs_consistent()

    def test_repeating_a_decision_is_a_noop(self, django_capture_on_commit_callbacks, recording_bus):
        booking = submit()
        handler = TransitionBookingHandler(DjangoBookingRepository(), bus=recording_bus)
        with django_capture_on_commit_callbacks(execute=True):
            handler.handle(TransitionBookingCommand(booking.application_id, "Approved"))

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            result = handler.handle(TransitionBookingCommand(booking.application_id, "approved"))

        assert result.status is BookingStatus.APPROVED
        assert callbacks == []
        assert Booking.objects.get().version == 2
        assert [type(e) for e in recording_bus.seen] == [BookingApproved]

    def test_decided_booking_cannot_be_flipped(self):
        booking = submit()
        transition(booking.application_id, "Approved")

        with pytest.raises(InvalidTransitionError):
            transition(booking.application_id, "Rejected", reason="Changed our mind")
        assert lookup_status(booking.application_id).status is BookingStatus.APPROVED

    def test_unknown_booking(self):
        with pytest.raises(NotFoundError):
            transition("HPU-0000-ZZZZZ", "Approved")

    def test_expected_version_must_match(self):
        booking = submit()

        with pytest.raises(StaleBookingError):
            transition(booking.application_id, "Approved", version=2)
        assert Booking.objects.get().status == "Pending"

        transition(booking.application_id, "Approved", version=1)
        assert Booking.objects.get().version == 2

    def test_concurrent_writer_is_not_overwritten(self):
        booking = submit()
        first, second = DjangoBookingRepository(), DjangoBookingRepository()
        mine = first.get(booking.application_id)
        theirs = second.get(booking.application_id)

        mine.approve(mine.submitted_at)
        first.save(mine)
        theirs.reject("Dates unavailable", theirs.submitted_at)

        with pytest.raises(StaleBookingError):
            second.save(theirs)
        assert Booking.objects.get().status == "Approved"
        assert_pairs_consistent()

    def test_missing_status_record_aborts_the_update(self):
        booking = submit()
        StatusLookup.objects.all().delete()

        with pytest.raises(PersistenceError):
            transition(booking.application_id, "Approved")
        assert Booking.objects.get().status == "Pending"


@pytest.mark.django_db
class TestCancel:
    def test_requester_cancels_pending_booking(self):
        booking = submit()
        handler = CancelBookingHandler(DjangoBookingRepository())

        result = handler.handle(CancelBookingCommand(booking.application_id, "A@X.com "))

        assert result.status is BookingStatus.CANCELLED
        assert lookup_status(booking.application_id).status is BookingStatus.CANCELLED
        assert_pairs_consistent()

    def test_wrong_email_looks_like_unknown_booking(self):
        booking = submit()

        with pytest.raises(NotFoundError):
            CancelBookingHandler(DjangoBookingRepository()).handle(
                CancelBookingCommand(booking.application_id, "someone@else.com")
            )
        assert Booking.objects.get().status == "Pending"

    def test_decided_booking_cannot_be_cancelled(self):
        booking = submit()
        transition(booking.application_id, "Approved")

        with pytest.raises(InvalidTransitionError):
            CancelBookingHandler(DjangoBookingRepository()).handle(
                CancelBookingCommand(booking.application_id, "a@x.com")
            )


@pytest.mark.django_db
class TestQueries:
    def test_lookup_unknown_id(self):
        with pytest.raises(NotFoundError):
            lookup_status("NONEXISTENT-ID")
        with pytest.raises(NotFoundError):
            lookup_status("   ")

    def test_lookup_trims_whitespace(self):
        booking = submit()

        assert lookup_status(f"  {booking.application_id} ").application_id == booking.application_id

    def test_lookup_store_failure(self):
        with mock.patch.object(StatusLookup.objects, "in_namespace", side_effect=DatabaseError("gone")):
            with pytest.raises(PersistenceError):
                lookup_status("HPU-0000-AAAAA")

    def test_list_newest_first_and_filtered(self):
        older = submit()
        newer = submit(email="b@x.com")
        transition(newer.application_id, "Approved")

        assert [b.application_id for b in list_bookings()] == [newer.application_id, older.application_id]
        assert [b.application_id for b in list_bookings(status="approved")] == [newer.application_id]

    def test_other_namespace_is_invisible(self):
        SubmitBookingHandler(DjangoBookingRepository(namespace="another-portal")).handle(submit_command())

        assert list(list_bookings()) == []
        assert booking_stats()["total"] == 0

    def test_stats(self):
        submit()
        approved = submit(email="b@x.com")
        transition(approved.application_id, "Approved")

        assert booking_stats() == {"total": 2, "Pending": 1, "Approved": 1, "Rejected": 0, "Cancelled": 0}
