"""Booking storage models for the guest-house portal.

Two tables back one booking:

* ``Booking`` is the private, full-detail record (staff only).
* ``StatusLookup`` is the public projection a requester reads with the
  application id alone. It carries no personal data.

Both rows are only ever written together, inside one transaction, by
``apps.bookings.repositories.DjangoBookingRepository``.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.infrastructure.fields import EncryptedCharField


def default_namespace() -> str:
    return settings.GUESTHOUSE_NAMESPACE


class BookingStatusChoices(models.TextChoices):
    PENDING = "Pending", _("Pending")
    APPROVED = "Approved", _("Approved")
    REJECTED = "Rejected", _("Rejected")
    CANCELLED = "Cancelled", _("Cancelled")


class NamespacedQuerySet(models.QuerySet):
    def in_namespace(self, namespace: str | None = None):
        return self.filter(namespace=namespace or settings.GUESTHOUSE_NAMESPACE)


class Booking(models.Model):
    """Private booking record with the applicant's personal details."""

    Status = BookingStatusChoices

    class IdProof(models.TextChoices):
        AADHAR = "aadhar", _("Aadhar Card")
        PASSPORT = "passport", _("Passport")
        DRIVING_LICENSE = "driving_license", _("Driving License")
        VOTER_ID = "voter_id", _("Voter ID")

    class Purpose(models.TextChoices):
        OFFICIAL = "official", _("Official")
        PERSONAL = "personal", _("Personal")
        EVENT = "event", _("Event/Conference")
        OTHER = "other", _("Other")

    namespace = models.CharField(max_length=64, default=default_namespace, editable=False)
    application_id = models.CharField(max_length=32, editable=False)
    name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=32)
    address = models.TextField()
    id_proof = models.CharField(max_length=32, choices=IdProof.choices, default=IdProof.AADHAR)
    id_number = EncryptedCharField(blank=True)
    check_in = models.DateField()
    check_out = models.DateField()
    guest_count = models.PositiveSmallIntegerField(default=1)
    purpose = models.CharField(max_length=32, choices=Purpose.choices, default=Purpose.OFFICIAL)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    rejection_reason = models.TextField(blank=True)
    submitted_at = models.DateTimeField(editable=False)
    status_changed_at = models.DateTimeField(null=True, blank=True)
    version = models.PositiveIntegerField(default=1)

    objects = NamespacedQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-submitted_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["namespace", "application_id"],
                name="booking_unique_application_id",
            ),
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="booking_valid_dates",
            ),
            models.CheckConstraint(
                condition=models.Q(guest_count__gte=1),
                name="booking_positive_guest_count",
            ),
        ]
        indexes = [
            models.Index(fields=["namespace", "status"], name="booking_ns_status_idx"),
            models.Index(fields=["namespace", "-submitted_at"], name="booking_ns_submitted_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.application_id} ({self.status})"


class StatusLookup(models.Model):
    """Public status record, keyed by application id."""

    Status = BookingStatusChoices

    namespace = models.CharField(max_length=64, default=default_namespace, editable=False)
    application_id = models.CharField(max_length=32, editable=False)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    check_in = models.DateField()

    objects = NamespacedQuerySet.as_manager()

    class Meta:
        verbose_name = _("Status lookup")
        verbose_name_plural = _("Status lookups")
        constraints = [
            models.UniqueConstraint(
                fields=["namespace", "application_id"],
                name="status_lookup_unique_application_id",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.application_id}: {self.status}"
