"""
Booking Domain Events

Events that represent things that have happened to a booking.
They are published after successful transaction commits.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass
class BookingEvent(DomainEvent):
    """
    Common payload of booking events

    Carries what the applicant notification needs, so handlers never
    have to read the booking back from the store.
    """
    application_id: str = ''
    applicant_name: str = ''
    applicant_email: str = ''
    check_in: Optional[date] = None
    status: str = ''


@dataclass
class BookingSubmitted(BookingEvent):
    """
    Event: A new booking request was stored (status Pending)

    Triggers:
    - "submitted" email to the applicant
    - Live feed refresh
    """


@dataclass
class BookingApproved(BookingEvent):
    """
    Event: Pending -> Approved

    Triggers:
    - "approved" email to the applicant
    - Live feed refresh
    """


@dataclass
class BookingRejected(BookingEvent):
    """
    Event: Pending -> Rejected

    Triggers:
    - "rejected" email to the applicant
    - Live feed refresh
    """
    reason: str = ''


@dataclass
class BookingCancelled(BookingEvent):
    """
    Event: Pending -> Cancelled (requester withdrew)

    Triggers:
    - Live feed refresh
    """
