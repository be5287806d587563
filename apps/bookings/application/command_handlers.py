"""
Booking Command Handlers

Use cases of the booking record manager. Each one runs inside a single
``DjangoUnitOfWork`` so the private booking and its public status record
are written together or not at all. Notifications are never sent from
here: they hang off the domain events the unit of work publishes after
commit.

Commands:
- SubmitBookingCommand: store a new booking request (status Pending)
- TransitionBookingCommand: administrator approves or rejects a booking
- CancelBookingCommand: requester withdraws a pending booking
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional
import logging

from django.conf import settings
from django.db import DatabaseError, IntegrityError
from django.utils import timezone

from apps.bookings.domain.entities import Booking, IdProof, Purpose, parse_review
from apps.bookings.domain.identifiers import generator_for_prefix
from apps.bookings.exceptions import PersistenceError, StaleBookingError
from shared.application.uow import DjangoUnitOfWork

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class SubmitBookingCommand:
    """Command to store a new booking request"""
    name: str
    email: str
    phone: str
    address: str
    check_in: date
    check_out: date
    guest_count: int
    purpose: str = Purpose.OFFICIAL.value
    id_proof: str = IdProof.AADHAR.value
    id_number: str = ''


@dataclass
class TransitionBookingCommand:
    """
    Command to approve or reject a booking

    ``reason`` is required for a rejection and forbidden otherwise.
    ``expected_version`` turns on the optimistic concurrency check.
    """
    application_id: str
    status: str
    reason: Optional[str] = None
    expected_version: Optional[int] = None


@dataclass
class CancelBookingCommand:
    """Command for a requester to withdraw a pending booking"""
    application_id: str
    email: str


# ===== Command Handlers =====

class SubmitBookingHandler:
    """
    Handler for SubmitBooking command

    1. Validate the request (no store access on failure)
    2. Generate an application id
    3. Insert booking + status record in one transaction
    4. On a duplicate id, retry with a freshly generated id
    5. BookingSubmitted is published after commit
    """

    def __init__(
        self,
        booking_repo,
        *,
        id_generator: Optional[Callable[[], str]] = None,
        clock: Callable = timezone.now,
        max_attempts: Optional[int] = None,
        max_guests: Optional[int] = None,
        bus=None,
    ):
        self.booking_repo = booking_repo
        self.id_generator = id_generator or generator_for_prefix(settings.GUESTHOUSE_ID_PREFIX)
        self.clock = clock
        self.max_attempts = max_attempts or settings.GUESTHOUSE_ID_RETRIES
        self.max_guests = max_guests or settings.GUESTHOUSE_MAX_GUESTS
        self.bus = bus

    def _build(self, command: SubmitBookingCommand) -> Booking:
        return Booking.submit(
            self.id_generator(),
            name=command.name,
            email=command.email,
            phone=command.phone,
            address=command.address,
            check_in=command.check_in,
            check_out=command.check_out,
            guest_count=command.guest_count,
            purpose=command.purpose,
            id_proof=command.id_proof,
            id_number=command.id_number,
            submitted_at=self.clock(),
            max_guests=self.max_guests,
        )

    def _id_collision(self, application_id: str) -> bool:
        """Whether an IntegrityError came from the application id already being in use"""
        try:
            return self.booking_repo.id_taken(application_id)
        except DatabaseError:
            return False

    def handle(self, command: SubmitBookingCommand) -> Booking:
        """
        Handle booking submission

        Returns: the stored Booking aggregate

        Raises:
            BookingValidationError: invalid input, nothing was written
            PersistenceError: the store rejected the write, nothing was written
        """
        for attempt in range(1, self.max_attempts + 1):
            booking = self._build(command)
            try:
                with DjangoUnitOfWork(bus=self.bus) as uow:
                    self.booking_repo.add(booking)
                    uow.collect_events(booking)
            except IntegrityError as exc:
                if not self._id_collision(booking.application_id):
                    logger.error(f"Failed to store booking {booking.application_id}: {exc}", exc_info=True)
                    raise PersistenceError() from exc
                logger.warning(
                    f"Application id {booking.application_id} rejected by the store "
                    f"(attempt {attempt}/{self.max_attempts}): {exc}"
                )
                continue
            except DatabaseError as exc:
                logger.error(f"Failed to store booking {booking.application_id}: {exc}", exc_info=True)
                raise PersistenceError() from exc

            logger.info(f"Booking submitted: {booking.application_id} ({booking.stay})")
            return booking

        raise PersistenceError("Could not allocate a unique application ID. Please try again.")


class _StatusChangeHandler:
    """Load, change and save one booking inside a unit of work"""

    def __init__(self, booking_repo, *, clock: Callable = timezone.now, bus=None):
        self.booking_repo = booking_repo
        self.clock = clock
        self.bus = bus

    def _run(self, application_id: str, load, change) -> Booking:
        try:
            with DjangoUnitOfWork(bus=self.bus) as uow:
                booking = load()
                if change(booking):
                    self.booking_repo.save(booking)
                    uow.collect_events(booking)
                else:
                    logger.info(f"Booking {application_id} already {booking.status.value}, nothing to do")
        except DatabaseError as exc:
            logger.error(f"Failed to update booking {application_id}: {exc}", exc_info=True)
            raise PersistenceError() from exc
        return booking


class TransitionBookingHandler(_StatusChangeHandler):
    """
    Handler for administrator decisions

    Setting the status a booking already has is a no-op success: nothing
    is written and no notification goes out. Any other move out of a
    terminal status raises InvalidTransitionError.
    """

    def handle(self, command: TransitionBookingCommand) -> Booking:
        """
        Raises:
            BookingValidationError: bad target/reason, checked before the store
            InvalidTransitionError: status does not allow the move
            NotFoundError: unknown application id
            StaleBookingError: expected_version does not match
            PersistenceError: the store rejected the update
        """
        target, reason = parse_review(command.status, command.reason)
        logger.info(f"Reviewing booking {command.application_id}: {target.value}")

        def load() -> Booking:
            booking = self.booking_repo.get(command.application_id, lock=True)
            if command.expected_version is not None and booking.version != command.expected_version:
                raise StaleBookingError(command.application_id, command.expected_version, booking.version)
            return booking

        booking = self._run(
            command.application_id,
            load,
            lambda booking: booking.review(target, reason, at=self.clock()),
        )
        logger.info(f"Booking {booking.application_id} is {booking.status.value} (version {booking.version})")
        return booking


class CancelBookingHandler(_StatusChangeHandler):
    """
    Handler for requester cancellation

    The email must match the applicant's; a mismatch looks exactly like
    an unknown application id.
    """

    def handle(self, command: CancelBookingCommand) -> Booking:
        logger.info(f"Cancellation requested for booking {command.application_id}")
        booking = self._run(
            command.application_id,
            lambda: self.booking_repo.get_for_requester(command.application_id, command.email, lock=True),
            lambda booking: booking.cancel(at=self.clock()),
        )
        return booking
