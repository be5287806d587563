"""
Common Value Objects

- StayDates: check-in (inclusive) to check-out (exclusive) of one stay
"""

from dataclasses import dataclass
from datetime import date

from shared.domain.base import ValueObject


@dataclass(frozen=True)
class StayDates(ValueObject):
    """
    Dates of a stay

    The guest arrives on ``check_in`` and leaves on ``check_out``; the
    check-out day is not a night of the stay.
    """
    check_in: date
    check_out: date

    def __post_init__(self):
        if not isinstance(self.check_in, date) or not isinstance(self.check_out, date):
            raise TypeError("Check-in and check-out must be dates")
        if self.check_out <= self.check_in:
            raise ValueError(f"Check-out ({self.check_out}) must be after check-in ({self.check_in})")

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def __str__(self):
        return f"{self.check_in.isoformat()}..{self.check_out.isoformat()} ({self.nights}n)"
