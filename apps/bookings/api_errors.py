"""Translate booking errors into DRF API errors."""

from __future__ import annotations

import logging

from rest_framework import exceptions, status  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from .exceptions import (
    BookingError,
    BookingValidationError,
    NotFoundError,
    PersistenceError,
    StaleBookingError,
)

logger = logging.getLogger(__name__)


class BookingConflict(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The booking was modified by someone else."
    default_code = "stale_booking"


class StoreUnavailable(exceptions.APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "The booking store is unavailable. Please try again."
    default_code = "store_unavailable"


def to_api_exception(exc: BookingError) -> exceptions.APIException:
    if isinstance(exc, BookingValidationError):
        logger.info(f"Booking request rejected: {sorted(exc.errors)}")
        return exceptions.ValidationError(exc.errors)
    if isinstance(exc, NotFoundError):
        logger.info(f"Booking not found: {exc.application_id or '<empty>'}")
        return exceptions.NotFound(exc.message)
    if isinstance(exc, StaleBookingError):
        return BookingConflict(exc.message)
    if isinstance(exc, PersistenceError):
        return StoreUnavailable(exc.message)
    return exceptions.APIException(exc.message)


def booking_exception_handler(exc, context):
    """REST_FRAMEWORK["EXCEPTION_HANDLER"]: booking errors first, then DRF defaults."""
    if isinstance(exc, BookingError):
        exc = to_api_exception(exc)
    return exception_handler(exc, context)
