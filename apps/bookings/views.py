"""API views for the booking domain."""

from __future__ import annotations

import json
import logging

from django.conf import settings  # type: ignore
from django.core.handlers.asgi import ASGIRequest  # type: ignore
from django.http import StreamingHttpResponse  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, renderers, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from .application.command_handlers import (
    CancelBookingHandler,
    SubmitBookingHandler,
    TransitionBookingHandler,
)
from .application.queries import booking_stats, list_bookings, lookup_status
from .feed import astream_snapshots, booking_feed, stream_snapshots
from .filters import BookingFilterSet
from .models import Booking
from .repositories import DjangoBookingRepository
from .serializers import (
    AdminBookingSerializer,
    BookingStatsSerializer,
    BookingSubmitSerializer,
    CancelSerializer,
    StatusLookupSerializer,
    SubmitResultSerializer,
    TransitionSerializer,
)

logger = logging.getLogger(__name__)


class EventStreamRenderer(renderers.BaseRenderer):
    """Lets ``Accept: text/event-stream`` pass content negotiation."""

    media_type = "text/event-stream"
    format = "sse"
    charset = "utf-8"

    def render(self, data, accepted_media_type=None, renderer_context=None):  # type: ignore
        if data is None:
            return b""
        if isinstance(data, (bytes, str)):
            return data
        return json.dumps(data, default=str).encode(self.charset)


class BookingSubmitView(APIView):
    """Public booking request: returns the application id to keep."""

    permission_classes = [permissions.AllowAny]
    authentication_classes: list = []

    def post(self, request):  # type: ignore
        serializer = BookingSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = SubmitBookingHandler(DjangoBookingRepository()).handle(serializer.to_command())
        return Response(SubmitResultSerializer(booking).data, status=status.HTTP_201_CREATED)


class StatusLookupView(APIView):
    """Public status lookup by application id."""

    permission_classes = [permissions.AllowAny]
    authentication_classes: list = []

    def get(self, request, application_id: str):  # type: ignore
        view = lookup_status(application_id)
        return Response(StatusLookupSerializer(view).data)


class CancelBookingView(APIView):
    """Requester withdraws a pending booking; the email must match."""

    permission_classes = [permissions.AllowAny]
    authentication_classes: list = []

    def post(self, request, application_id: str):  # type: ignore
        serializer = CancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = CancelBookingHandler(DjangoBookingRepository()).handle(
            serializer.to_command(application_id.strip())
        )
        return Response(SubmitResultSerializer(booking).data, status=status.HTTP_200_OK)


class AdminBookingViewSet(viewsets.ReadOnlyModelViewSet):
    """Review queue for staff: list, detail, decisions, counters and live feed."""

    serializer_class = AdminBookingSerializer
    permission_classes = [permissions.IsAdminUser]
    lookup_field = "application_id"
    lookup_value_regex = "[^/]+"
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = BookingFilterSet
    ordering_fields = ["submitted_at", "check_in", "status"]

    def get_queryset(self):  # type: ignore
        return list_bookings()

    @action(detail=True, methods=["post"])
    def transition(self, request, application_id=None):  # type: ignore
        serializer = TransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        command = serializer.to_command(application_id)
        TransitionBookingHandler(DjangoBookingRepository()).handle(command)
        logger.info(f"{request.user} set booking {application_id} to {command.status}")
        row = Booking.objects.in_namespace().get(application_id=application_id)
        return Response(AdminBookingSerializer(row).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):  # type: ignore
        return Response(BookingStatsSerializer(booking_stats()).data)

    @action(
        detail=False,
        methods=["get"],
        renderer_classes=[EventStreamRenderer, renderers.JSONRenderer],
    )
    def stream(self, request):  # type: ignore
        logger.info(f"Live booking feed opened by {request.user}")
        keepalive = settings.GUESTHOUSE_FEED_KEEPALIVE
        # ASGI drains sync iterators to the end before sending anything
        if isinstance(request._request, ASGIRequest):
            body = astream_snapshots(booking_feed, keepalive)
        else:
            body = stream_snapshots(booking_feed, keepalive)
        response = StreamingHttpResponse(body, content_type="text/event-stream")
        response["Cache-Control"] = "no-cache"
        response["X-Accel-Buffering"] = "no"
        return response
