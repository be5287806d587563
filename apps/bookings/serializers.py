"""Serializers for the booking domain."""

from __future__ import annotations

from datetime import date

from django.conf import settings  # type: ignore
from rest_framework import serializers  # type: ignore

from .application.command_handlers import (
    CancelBookingCommand,
    SubmitBookingCommand,
    TransitionBookingCommand,
)
from .domain.entities import BookingStatus
from .models import Booking


class BookingSubmitSerializer(serializers.Serializer):
    """Public booking request form."""

    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=32)
    address = serializers.CharField()
    idProof = serializers.ChoiceField(
        source="id_proof", choices=Booking.IdProof.choices, default=Booking.IdProof.AADHAR.value
    )
    idNumber = serializers.CharField(source="id_number", required=False, allow_blank=True, default="")
    checkIn = serializers.DateField(source="check_in")
    checkOut = serializers.DateField(source="check_out")
    guestCount = serializers.IntegerField(source="guest_count", min_value=1, default=1)
    purpose = serializers.ChoiceField(choices=Booking.Purpose.choices, default=Booking.Purpose.OFFICIAL.value)

    def validate_guestCount(self, value: int) -> int:  # noqa: N802
        if value > settings.GUESTHOUSE_MAX_GUESTS:
            raise serializers.ValidationError(
                f"At most {settings.GUESTHOUSE_MAX_GUESTS} guests per booking."
            )
        return value

    def validate(self, attrs):  # type: ignore
        check_in: date = attrs["check_in"]
        check_out: date = attrs["check_out"]
        if check_out <= check_in:
            raise serializers.ValidationError({"checkOut": ["Check-out must be after check-in."]})
        return attrs

    def to_command(self) -> SubmitBookingCommand:
        return SubmitBookingCommand(**self.validated_data)


class SubmitResultSerializer(serializers.Serializer):
    applicationId = serializers.CharField(source="application_id")
    status = serializers.CharField(source="status.value")


class StatusLookupSerializer(serializers.Serializer):
    """What a requester sees: no personal data."""

    applicationId = serializers.CharField(source="application_id")
    status = serializers.CharField(source="status.value")
    checkIn = serializers.DateField(source="check_in")


class AdminBookingSerializer(serializers.ModelSerializer):
    """Full booking record for administrators."""

    applicationId = serializers.CharField(source="application_id", read_only=True)
    idProof = serializers.CharField(source="id_proof", read_only=True)
    idNumber = serializers.CharField(source="id_number", read_only=True)
    checkIn = serializers.DateField(source="check_in", read_only=True)
    checkOut = serializers.DateField(source="check_out", read_only=True)
    guestCount = serializers.IntegerField(source="guest_count", read_only=True)
    rejectionReason = serializers.CharField(source="rejection_reason", read_only=True)
    submittedAt = serializers.DateTimeField(source="submitted_at", read_only=True)
    statusChangedAt = serializers.DateTimeField(source="status_changed_at", read_only=True)
    nights = serializers.SerializerMethodField()
    isFinal = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "applicationId",
            "name",
            "email",
            "phone",
            "address",
            "idProof",
            "idNumber",
            "checkIn",
            "checkOut",
            "nights",
            "guestCount",
            "purpose",
            "status",
            "rejectionReason",
            "submittedAt",
            "statusChangedAt",
            "isFinal",
            "version",
        ]
        read_only_fields = fields

    def get_nights(self, obj: Booking) -> int:
        return (obj.check_out - obj.check_in).days

    def get_isFinal(self, obj: Booking) -> bool:  # noqa: N802
        return BookingStatus(obj.status).is_terminal


class TransitionSerializer(serializers.Serializer):
    status = serializers.CharField()
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    version = serializers.IntegerField(required=False, min_value=1, allow_null=True, default=None)

    def to_command(self, application_id: str) -> TransitionBookingCommand:
        data = self.validated_data
        return TransitionBookingCommand(
            application_id=application_id,
            status=data["status"],
            reason=data["reason"],
            expected_version=data["version"],
        )


class CancelSerializer(serializers.Serializer):
    email = serializers.EmailField()

    def to_command(self, application_id: str) -> CancelBookingCommand:
        return CancelBookingCommand(application_id=application_id, email=self.validated_data["email"])


class BookingStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    Pending = serializers.IntegerField()
    Approved = serializers.IntegerField()
    Rejected = serializers.IntegerField()
    Cancelled = serializers.IntegerField()
