"""
SinkClock - Injectable UTC clock.

Destination keys and flush timestamps are read from a SinkClock so tests
can pin the time a sink observes.
"""

import threading
from datetime import datetime, timedelta, timezone
from typing import Optional


class SinkClock:
    """
    A UTC clock that can be frozen and advanced.

    Usage:
        clock = SinkClock()
        clock.freeze(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))
        clock.advance(hours=1)
        assert clock.now().hour == 13
    """

    def __init__(self, frozen_time: Optional[datetime] = None):
        self._frozen_time: Optional[datetime] = None
        self._lock = threading.Lock()
        if frozen_time is not None:
            self.freeze(frozen_time)

    def now(self) -> datetime:
        """
        Get the current time.

        Returns:
            Timezone-aware UTC datetime (frozen or real)
        """
        with self._lock:
            if self._frozen_time is not None:
                return self._frozen_time
        return datetime.now(timezone.utc)

    def freeze(self, dt: datetime) -> None:
        """
        Freeze the clock at a specific time.

        Naive datetimes are taken to be UTC.
        """
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        with self._lock:
            self._frozen_time = dt.astimezone(timezone.utc)

    def advance(self, **delta) -> None:
        """Move a frozen clock forward by a timedelta's keyword arguments."""
        with self._lock:
            if self._frozen_time is None:
                raise RuntimeError("Only a frozen clock can be advanced")
            self._frozen_time = self._frozen_time + timedelta(**delta)

    def unfreeze(self) -> None:
        """Unfreeze the clock to return real time."""
        with self._lock:
            self._frozen_time = None

    @property
    def is_frozen(self) -> bool:
        with self._lock:
            return self._frozen_time is not None


# Shared real-time clock used when a sink is not given one
system_clock = SinkClock()
