"""
Application identifiers

Human-shareable keys of the form ``HPU-XXXX-XXXXX``:
- a fixed institutional tag
- the last four base-36 digits of the current millisecond timestamp
- five random base-36 digits

The random part is not cryptographically unique. The generator remembers
the ids it issued recently and draws again on a repeat; collisions across
processes surface as a duplicate-key error on insert and are retried by
the submit handler with a fresh id.
"""

import re
import secrets
import string
import threading
import time
from collections import deque
from functools import lru_cache
from typing import Callable, Deque, Set

BASE36_ALPHABET = string.digits + string.ascii_uppercase
TIMESTAMP_DIGITS = 4
RANDOM_DIGITS = 5
DEFAULT_PREFIX = 'HPU'

APPLICATION_ID_RE = re.compile(
    rf'^[A-Z]+-[0-9A-Z]{{{TIMESTAMP_DIGITS}}}-[0-9A-Z]{{{RANDOM_DIGITS}}}$'
)


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("Only non-negative integers can be encoded")
    if value == 0:
        return '0'
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return ''.join(reversed(digits))


class ApplicationIdGenerator:
    """Thread-safe callable that returns a fresh application id."""

    def __init__(
        self,
        prefix: str = DEFAULT_PREFIX,
        *,
        clock: Callable[[], float] = time.time,
        choice: Callable[[str], str] = secrets.choice,
        memory: int = 65536,
        max_attempts: int = 32,
    ):
        if not prefix or not prefix.isalpha():
            raise ValueError(f"Invalid application id prefix: {prefix!r}")
        self.prefix = prefix.upper()
        self._clock = clock
        self._choice = choice
        self._max_attempts = max_attempts
        self._recent: Deque[str] = deque(maxlen=memory)
        self._issued: Set[str] = set()
        self._lock = threading.Lock()

    def _draw(self) -> str:
        millis = int(self._clock() * 1000)
        stamp = to_base36(millis)[-TIMESTAMP_DIGITS:].rjust(TIMESTAMP_DIGITS, '0')
        tail = ''.join(self._choice(BASE36_ALPHABET) for _ in range(RANDOM_DIGITS))
        return f"{self.prefix}-{stamp}-{tail}"

    def _remember(self, application_id: str) -> None:
        if len(self._recent) == self._recent.maxlen:
            self._issued.discard(self._recent[0])
        self._recent.append(application_id)
        self._issued.add(application_id)

    def __call__(self) -> str:
        with self._lock:
            for _ in range(self._max_attempts):
                candidate = self._draw()
                if candidate not in self._issued:
                    self._remember(candidate)
                    return candidate
        raise RuntimeError(
            f"Could not draw an unused application id in {self._max_attempts} attempts; "
            "check the random source"
        )


def is_application_id(value: str) -> bool:
    return bool(APPLICATION_ID_RE.match(value or ''))


@lru_cache(maxsize=None)
def generator_for_prefix(prefix: str) -> ApplicationIdGenerator:
    """One shared generator per institutional prefix."""
    return ApplicationIdGenerator(prefix)


generate_application_id = generator_for_prefix(DEFAULT_PREFIX)
