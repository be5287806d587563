"""Error kinds raised by the booking record manager."""

from __future__ import annotations

from typing import Mapping, Sequence, Union

ErrorDetail = Union[str, Sequence[str]]


class BookingError(Exception):
    """Base class for booking errors."""

    default_message = "Booking operation failed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self.args[0])


class BookingValidationError(BookingError):
    """Malformed or missing input, raised before any store call."""

    default_message = "Invalid booking data."

    def __init__(self, errors: Mapping[str, ErrorDetail] | str | None = None):
        if isinstance(errors, str) or errors is None:
            message = errors or self.default_message
            self.errors: dict[str, list[str]] = {"non_field_errors": [message]}
        else:
            self.errors = {
                field: [detail] if isinstance(detail, str) else list(detail)
                for field, detail in errors.items()
            }
            message = "; ".join(f"{field}: {' '.join(msgs)}" for field, msgs in self.errors.items())
        super().__init__(message)


class InvalidTransitionError(BookingValidationError):
    """The requested status change is not allowed from the current status."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__({"status": f"Cannot change status from {current} to {target}."})


class NotFoundError(BookingError):
    """No booking exists for the given application id."""

    default_message = "No booking found for this application ID."

    def __init__(self, application_id: str = ""):
        self.application_id = application_id
        super().__init__()


class PersistenceError(BookingError):
    """The store rejected a read or write. Safe to retry."""

    default_message = "The booking could not be saved. Please try again."


class StaleBookingError(BookingError):
    """The booking changed since the caller last read it."""

    def __init__(self, application_id: str, expected: int, actual: int):
        self.application_id = application_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Booking {application_id} was modified (version {actual}, expected {expected}). Reload and retry."
        )
