"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, StatusLookup


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    """Read-only view: status changes go through the review API so both records stay in step."""

    list_display = (
        "application_id",
        "name",
        "email",
        "status",
        "check_in",
        "check_out",
        "guest_count",
        "submitted_at",
    )
    list_filter = ("status", "purpose", "check_in")
    search_fields = ("application_id", "name", "email", "phone")
    readonly_fields = [field.name for field in Booking._meta.fields]

    def has_add_permission(self, request):  # type: ignore
        return False

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False


@admin.register(StatusLookup)
class StatusLookupAdmin(admin.ModelAdmin):
    list_display = ("application_id", "status", "check_in", "namespace")
    list_filter = ("status",)
    search_fields = ("application_id",)
    readonly_fields = ("namespace", "application_id", "status", "check_in")

    def has_add_permission(self, request):  # type: ignore
        return False

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False
