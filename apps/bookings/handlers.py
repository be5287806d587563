"""
Booking Event Handlers

Post-commit side effects of booking changes. They run only after the
transaction that produced the event has committed, and a failure here
never undoes or fails the booking change itself.
"""

import logging

from apps.bookings.domain.events import (
    BookingApproved,
    BookingCancelled,
    BookingEvent,
    BookingRejected,
    BookingSubmitted,
)
from apps.bookings.feed import booking_feed
from apps.notifications.services import NotificationTemplate, build_payload
from apps.notifications.tasks import send_applicant_email
from shared.application.message_bus import message_bus

logger = logging.getLogger(__name__)

EMAIL_TEMPLATES = {
    BookingSubmitted: NotificationTemplate.SUBMITTED,
    BookingApproved: NotificationTemplate.APPROVED,
    BookingRejected: NotificationTemplate.REJECTED,
}


def notify_applicant(event: BookingEvent) -> None:
    """Queue the applicant email for this event (fire-and-forget)."""
    template = EMAIL_TEMPLATES.get(type(event))
    if template is None or not event.applicant_email:
        return

    payload = build_payload(event.applicant_name, event.application_id, event.check_in)
    try:
        send_applicant_email.delay(event.applicant_email, template.value, payload)
    except Exception as e:
        logger.error(
            f"Could not queue '{template.value}' email for {event.application_id}: {e}",
            exc_info=True,
        )
        return
    logger.info(f"Queued '{template.value}' email for {event.application_id}")


def refresh_booking_feed(event: BookingEvent) -> None:
    """Push a fresh snapshot to live admin subscribers."""
    delivered = booking_feed.publish()
    if delivered:
        logger.debug(f"Feed refreshed for {delivered} subscriber(s) after {type(event).__name__}")


def register_event_handlers(bus=message_bus) -> None:
    for event_type in (BookingSubmitted, BookingApproved, BookingRejected):
        bus.register_event_handler(event_type, notify_applicant)
    for event_type in (BookingSubmitted, BookingApproved, BookingRejected, BookingCancelled):
        bus.register_event_handler(event_type, refresh_booking_feed)
