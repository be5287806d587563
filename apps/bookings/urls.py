"""Public URL routing for the booking domain."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import BookingSubmitView, CancelBookingView, StatusLookupView

app_name = "bookings"

urlpatterns = [
    path("", BookingSubmitView.as_view(), name="submit"),
    path("status/<str:application_id>/", StatusLookupView.as_view(), name="status"),
    path("status/<str:application_id>/cancel/", CancelBookingView.as_view(), name="cancel"),
]
