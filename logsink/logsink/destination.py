"""
Destination key selection.

A sink writes to a single object. Unless a key is configured it is
derived from the clock the first time it is needed, then held fixed.
"""

import threading
from datetime import datetime
from typing import Optional

from logsink.clock import SinkClock, system_clock

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def default_destination_key(now: datetime) -> str:
    """
    Build the time-bucketed key ``{year}/{month}/{day}/{hour}/logs.json``.

    Month is the English month name; day and hour are not zero-padded.
    """
    return f"{now.year}/{MONTH_NAMES[now.month - 1]}/{now.day}/{now.hour}/logs.json"


class Destination:
    """Lazily resolved, then fixed, destination key."""

    def __init__(self, key: Optional[str] = None, clock: Optional[SinkClock] = None):
        self._key = key or None
        self._clock = clock or system_clock
        self._lock = threading.Lock()

    def resolve(self) -> str:
        """Return the key, deriving it from the clock on first call."""
        with self._lock:
            if self._key is None:
                self._key = default_destination_key(self._clock.now())
            return self._key

    @property
    def key(self) -> Optional[str]:
        """The key, or None if it has not been derived yet."""
        with self._lock:
            return self._key


def content_disposition_for(key: str) -> str:
    return f"{key}.json"
