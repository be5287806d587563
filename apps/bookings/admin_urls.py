"""Staff URL routing for the booking review queue."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import AdminBookingViewSet

app_name = "bookings-admin"

router = DefaultRouter()
router.register(r"bookings", AdminBookingViewSet, basename="booking")

urlpatterns = [
    path("", include(router.urls)),
]
