"""
Booking Queries

Read side of the booking domain. The public lookup reads only the
``StatusLookup`` projection, never the private record.
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional
import logging

from django.conf import settings
from django.db import DatabaseError
from django.db.models import Count

from apps.bookings.domain.entities import BookingStatus
from apps.bookings.exceptions import NotFoundError, PersistenceError
from apps.bookings.models import Booking, StatusLookup

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusView:
    """What a requester may learn about a booking"""
    application_id: str
    status: BookingStatus
    check_in: date


def lookup_status(application_id: str, namespace: Optional[str] = None) -> StatusView:
    """
    Public status lookup by exact application id

    Raises:
        NotFoundError: no booking with this id (a normal outcome)
        PersistenceError: the store could not be read
    """
    key = (application_id or '').strip()
    if not key:
        raise NotFoundError(key)
    try:
        row = (
            StatusLookup.objects.in_namespace(namespace)
            .filter(application_id=key)
            .values('application_id', 'status', 'check_in')
            .first()
        )
    except DatabaseError as exc:
        logger.error(f"Status lookup for {key} failed: {exc}", exc_info=True)
        raise PersistenceError("Could not read the booking status. Please try again.") from exc

    if row is None:
        logger.info(f"Status lookup: no booking {key}")
        raise NotFoundError(key)
    return StatusView(row['application_id'], BookingStatus(row['status']), row['check_in'])


def list_bookings(namespace: Optional[str] = None, status: Optional[str] = None):
    """All bookings of the namespace, newest submission first"""
    queryset = Booking.objects.in_namespace(namespace).order_by('-submitted_at', '-id')
    if status:
        queryset = queryset.filter(status=BookingStatus.parse(status).value)
    return queryset


def booking_stats(namespace: Optional[str] = None) -> Dict[str, int]:
    """Dashboard counters: total and one entry per status"""
    counts = {status.value: 0 for status in BookingStatus}
    rows = Booking.objects.in_namespace(namespace).values('status').annotate(n=Count('id'))
    for row in rows:
        counts[row['status']] = row['n']
    return {'total': sum(counts.values()), **counts}


def booking_snapshot(namespace: Optional[str] = None, limit: Optional[int] = None) -> List[dict]:
    """Full-collection snapshot pushed to live subscribers"""
    from apps.bookings.serializers import AdminBookingSerializer

    queryset = list_bookings(namespace)
    limit = limit or settings.GUESTHOUSE_FEED_SNAPSHOT_LIMIT
    if limit:
        queryset = queryset[:limit]
    return AdminBookingSerializer(queryset, many=True).data
