"""FilterSet definitions for the admin booking list."""

from __future__ import annotations

import django_filters  # type: ignore

from .domain.entities import BookingStatus
from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    """``?status=`` (case-insensitive), ``?email=`` and check-in date range."""

    status = django_filters.CharFilter(method="filter_status")
    email = django_filters.CharFilter(field_name="email", lookup_expr="iexact")
    check_in_from = django_filters.DateFilter(field_name="check_in", lookup_expr="gte")
    check_in_to = django_filters.DateFilter(field_name="check_in", lookup_expr="lte")

    class Meta:
        model = Booking
        fields = ["status", "email"]

    def filter_status(self, queryset, name, value):  # type: ignore
        if not value:
            return queryset
        return queryset.filter(status=BookingStatus.parse(value).value)
