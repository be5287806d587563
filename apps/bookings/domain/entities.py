"""
Booking Domain Entities

- BookingStatus: closed set of lifecycle states and the allowed transitions
- IdProof, Purpose: enumerated applicant/stay attributes
- Booking: aggregate root for one reservation request
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email

from apps.bookings.domain.events import (
    BookingApproved,
    BookingCancelled,
    BookingEvent,
    BookingRejected,
    BookingSubmitted,
)
from apps.bookings.exceptions import BookingValidationError, InvalidTransitionError
from shared.domain.base import Aggregate, DomainEvent
from shared.domain.value_objects import StayDates

MAX_GUESTS = 10


class BookingStatus(str, Enum):
    """
    Booking Status Finite State Machine

    State transitions:
    - PENDING -> APPROVED (administrator)
    - PENDING -> REJECTED (administrator, reason required)
    - PENDING -> CANCELLED (requester withdrew)

    APPROVED, REJECTED and CANCELLED are terminal.
    """
    PENDING = 'Pending'
    APPROVED = 'Approved'
    REJECTED = 'Rejected'
    CANCELLED = 'Cancelled'

    @property
    def is_terminal(self) -> bool:
        return not TRANSITIONS[self]

    def can_become(self, target: 'BookingStatus') -> bool:
        return target in TRANSITIONS[self]

    @classmethod
    def parse(cls, value) -> 'BookingStatus':
        if isinstance(value, cls):
            return value
        for status in cls:
            if str(value).strip().lower() == status.value.lower():
                return status
        raise BookingValidationError({'status': f"Unknown booking status: {value!r}."})


TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.APPROVED, BookingStatus.REJECTED, BookingStatus.CANCELLED}),
    BookingStatus.APPROVED: frozenset(),
    BookingStatus.REJECTED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

# Statuses an administrator may set explicitly
REVIEW_TARGETS: FrozenSet[BookingStatus] = frozenset({BookingStatus.APPROVED, BookingStatus.REJECTED})


class IdProof(str, Enum):
    AADHAR = 'aadhar'
    PASSPORT = 'passport'
    DRIVING_LICENSE = 'driving_license'
    VOTER_ID = 'voter_id'


class Purpose(str, Enum):
    OFFICIAL = 'official'
    PERSONAL = 'personal'
    EVENT = 'event'
    OTHER = 'other'


def parse_review(target, reason: Optional[str]) -> Tuple[BookingStatus, str]:
    """
    Check an administrator decision without looking at any booking

    Returns the target status and the normalised reason.

    Raises:
        BookingValidationError: target is not APPROVED/REJECTED, or the
            reason is missing for a rejection / present for an approval
    """
    target = BookingStatus.parse(target)
    if target not in REVIEW_TARGETS:
        raise BookingValidationError(
            {'status': f"Status can only be set to {BookingStatus.APPROVED.value} or {BookingStatus.REJECTED.value}."}
        )
    reason = (reason or '').strip()
    if target is BookingStatus.REJECTED and not reason:
        raise BookingValidationError({'reason': "A reason is required to reject a booking."})
    if target is BookingStatus.APPROVED and reason:
        raise BookingValidationError({'reason': "A reason may only be given when rejecting."})
    return target, reason


def _choice(enum_cls, value, field_name: str, errors: Dict[str, str]):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ', '.join(member.value for member in enum_cls)
        errors[field_name] = f"Must be one of: {allowed}."
        return None


@dataclass(eq=False)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    The private, full-detail reservation request. Its public projection
    (status + check-in) is written by the repository in the same
    transaction every time the booking is saved.

    Key invariants:
    - check_in < check_out
    - 1 <= guest_count <= MAX_GUESTS
    - rejection_reason is non-empty exactly when status is REJECTED
    - status only moves along TRANSITIONS
    """

    application_id: str
    name: str
    email: str
    phone: str
    address: str
    stay: StayDates
    guest_count: int
    purpose: Purpose
    submitted_at: datetime
    id_proof: IdProof = IdProof.AADHAR
    id_number: str = ''
    status: BookingStatus = BookingStatus.PENDING
    rejection_reason: str = ''
    status_changed_at: Optional[datetime] = None
    version: int = 1

    _events: List[DomainEvent] = field(default_factory=list, init=False, repr=False, compare=False)

    @property
    def identity(self) -> str:
        return self.application_id

    @property
    def check_in(self) -> date:
        return self.stay.check_in

    @property
    def check_out(self) -> date:
        return self.stay.check_out

    @property
    def nights(self) -> int:
        return self.stay.nights

    # ----- creation -----

    @classmethod
    def submit(
        cls,
        application_id: str,
        *,
        name: str,
        email: str,
        phone: str,
        address: str,
        check_in: date,
        check_out: date,
        guest_count: int,
        submitted_at: datetime,
        purpose=Purpose.OFFICIAL,
        id_proof=IdProof.AADHAR,
        id_number: str = '',
        max_guests: int = MAX_GUESTS,
    ) -> 'Booking':
        """
        Validate a new request and create it in PENDING state

        All problems are reported together, keyed by field name.

        Raises:
            BookingValidationError: on any invalid field
        """
        errors: Dict[str, str] = {}
        cleaned = {}
        for field_name, value in (('name', name), ('email', email), ('phone', phone), ('address', address)):
            value = (value or '').strip()
            if not value:
                errors[field_name] = "This field may not be blank."
            cleaned[field_name] = value

        if 'email' not in errors:
            try:
                validate_email(cleaned['email'])
            except DjangoValidationError:
                errors['email'] = "Enter a valid email address."

        stay = None
        if not isinstance(check_in, date) or not isinstance(check_out, date):
            errors['check_out'] = "Check-in and check-out dates are required."
        elif check_out <= check_in:
            errors['check_out'] = "Check-out date must be after check-in date."
        else:
            stay = StayDates(check_in, check_out)

        if isinstance(guest_count, bool) or not isinstance(guest_count, int) or not 1 <= guest_count <= max_guests:
            errors['guest_count'] = f"Number of guests must be between 1 and {max_guests}."

        purpose = _choice(Purpose, purpose, 'purpose', errors)
        id_proof = _choice(IdProof, id_proof, 'id_proof', errors)

        if errors:
            raise BookingValidationError(errors)

        booking = cls(
            application_id=application_id,
            stay=stay,
            guest_count=guest_count,
            purpose=purpose,
            id_proof=id_proof,
            id_number=(id_number or '').strip(),
            submitted_at=submitted_at,
            status=BookingStatus.PENDING,
            **cleaned,
        )
        booking.add_event(booking._event(BookingSubmitted))
        return booking

    # ----- transitions -----

    def approve(self, at: datetime) -> bool:
        """Pending -> Approved. Returns False if already approved."""
        return self._move(BookingStatus.APPROVED, at)

    def reject(self, reason: str, at: datetime) -> bool:
        """Pending -> Rejected with a mandatory reason. Returns False if already rejected."""
        reason = (reason or '').strip()
        if not reason:
            raise BookingValidationError({'reason': "A reason is required to reject a booking."})
        if self.status is BookingStatus.REJECTED:
            return False
        self._move(BookingStatus.REJECTED, at, reason=reason)
        return True

    def cancel(self, at: datetime) -> bool:
        """Pending -> Cancelled. Returns False if already cancelled."""
        return self._move(BookingStatus.CANCELLED, at)

    def review(self, target, reason: Optional[str], at: datetime) -> bool:
        """
        Administrator decision (APPROVED or REJECTED)

        Returns True when the status changed, False for a no-op
        (target equals the current status).

        Raises:
            BookingValidationError: invalid target, or reason given/missing
            InvalidTransitionError: current status does not allow the move
        """
        target, reason = parse_review(target, reason)
        if target is BookingStatus.REJECTED:
            return self.reject(reason, at)
        return self.approve(at)

    def _move(self, target: BookingStatus, at: datetime, *, reason: str = '') -> bool:
        if self.status is target:
            return False
        if not self.status.can_become(target):
            raise InvalidTransitionError(self.status.value, target.value)

        self.status = target
        self.rejection_reason = reason if target is BookingStatus.REJECTED else ''
        self.status_changed_at = at
        self.version += 1

        if target is BookingStatus.APPROVED:
            self.add_event(self._event(BookingApproved))
        elif target is BookingStatus.REJECTED:
            self.add_event(self._event(BookingRejected, reason=reason))
        else:
            self.add_event(self._event(BookingCancelled))
        return True

    def _event(self, event_cls, **extra) -> BookingEvent:
        return event_cls(
            aggregate_id=self.application_id,
            application_id=self.application_id,
            applicant_name=self.name,
            applicant_email=self.email,
            check_in=self.check_in,
            status=self.status.value,
            **extra,
        )

    def __str__(self):
        return f"Booking {self.application_id} ({self.status.value})"
