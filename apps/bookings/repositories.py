"""Persistence of the Booking aggregate and its public status record.

Every method that writes touches both tables and must be called inside
``DjangoUnitOfWork`` (one ``transaction.atomic`` block), so a reader never
sees a booking without its status record or with a different status.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from .domain.entities import Booking, BookingStatus, IdProof, Purpose
from .exceptions import NotFoundError, PersistenceError, StaleBookingError
from .models import Booking as BookingModel
from .models import StatusLookup
from shared.domain.value_objects import StayDates

logger = logging.getLogger(__name__)


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def to_domain(row: BookingModel) -> Booking:
    return Booking(
        application_id=row.application_id,
        name=row.name,
        email=row.email,
        phone=row.phone,
        address=row.address,
        stay=StayDates(row.check_in, row.check_out),
        guest_count=row.guest_count,
        purpose=Purpose(row.purpose),
        id_proof=IdProof(row.id_proof),
        id_number=row.id_number or "",
        submitted_at=row.submitted_at,
        status=BookingStatus(row.status),
        rejection_reason=row.rejection_reason,
        status_changed_at=row.status_changed_at,
        version=row.version,
    )


class DjangoBookingRepository:
    """Booking repository over the Django ORM, scoped to one namespace."""

    def __init__(self, namespace: Optional[str] = None):
        self.namespace = namespace or settings.GUESTHOUSE_NAMESPACE
        self._loaded_versions: Dict[str, int] = {}

    def _bookings(self):
        return BookingModel.objects.in_namespace(self.namespace)

    def _lookups(self):
        return StatusLookup.objects.in_namespace(self.namespace)

    def add(self, booking: Booking) -> None:
        """Insert the private record and its public status record.

        A duplicate application id raises ``IntegrityError``.
        """
        BookingModel.objects.create(
            namespace=self.namespace,
            application_id=booking.application_id,
            name=booking.name,
            email=booking.email,
            phone=booking.phone,
            address=booking.address,
            id_proof=booking.id_proof.value,
            id_number=booking.id_number,
            check_in=booking.check_in,
            check_out=booking.check_out,
            guest_count=booking.guest_count,
            purpose=booking.purpose.value,
            status=booking.status.value,
            rejection_reason=booking.rejection_reason,
            submitted_at=booking.submitted_at,
            status_changed_at=booking.status_changed_at,
            version=booking.version,
        )
        StatusLookup.objects.create(
            namespace=self.namespace,
            application_id=booking.application_id,
            status=booking.status.value,
            check_in=booking.check_in,
        )
        self._loaded_versions[booking.application_id] = booking.version

    def id_taken(self, application_id: str) -> bool:
        """True if either record already uses ``application_id``."""
        return (
            self._bookings().filter(application_id=application_id).exists()
            or self._lookups().filter(application_id=application_id).exists()
        )

    def get(self, application_id: str, *, lock: bool = False) -> Booking:
        queryset = self._bookings().filter(application_id=application_id)
        if lock:
            queryset = _lock_queryset_if_possible(queryset)
        row = queryset.first()
        if row is None:
            raise NotFoundError(application_id)
        self._loaded_versions[application_id] = row.version
        return to_domain(row)

    def get_for_requester(self, application_id: str, email: str, *, lock: bool = False) -> Booking:
        """Load a booking only if ``email`` matches the applicant's.

        A mismatch is reported exactly like a missing booking.
        """
        queryset = self._bookings().filter(application_id=application_id, email__iexact=(email or "").strip())
        if lock:
            queryset = _lock_queryset_if_possible(queryset)
        row = queryset.first()
        if row is None:
            raise NotFoundError(application_id)
        self._loaded_versions[application_id] = row.version
        return to_domain(row)

    def save(self, booking: Booking) -> None:
        """Write the status fields of both records.

        The private row is updated only if it still has the version it was
        loaded with, so a concurrent writer cannot be silently overwritten.
        """
        loaded_version = self._loaded_versions.get(booking.application_id)
        if loaded_version is None:
            raise RuntimeError(f"Booking {booking.application_id} was not loaded through this repository")

        updated = self._bookings().filter(
            application_id=booking.application_id,
            version=loaded_version,
        ).update(
            status=booking.status.value,
            rejection_reason=booking.rejection_reason,
            status_changed_at=booking.status_changed_at,
            version=booking.version,
        )
        if not updated:
            current = self._bookings().filter(application_id=booking.application_id).values_list("version", flat=True).first()
            if current is None:
                raise NotFoundError(booking.application_id)
            raise StaleBookingError(booking.application_id, loaded_version, current)

        paired = self._lookups().filter(application_id=booking.application_id).update(status=booking.status.value)
        if paired != 1:
            logger.error(f"Status record missing for booking {booking.application_id}")
            raise PersistenceError(f"Status record for {booking.application_id} is missing.")

        self._loaded_versions[booking.application_id] = booking.version
