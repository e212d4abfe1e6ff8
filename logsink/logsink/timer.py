"""
TimerDriver - Periodic flush requests.
"""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class TimerDriver:
    """
    Background thread that calls a flush callback at a fixed interval.

    Each sink owns its own driver, so sinks with different destinations
    and intervals tick independently.
    """

    def __init__(
        self,
        interval: float,
        on_tick: Callable[[], object],
        name: str = "logsink-timer",
    ):
        """
        Initialize the driver.

        Args:
            interval: Seconds between ticks
            on_tick: Called on every tick
            name: Thread name
        """
        if interval <= 0:
            raise ValueError("TimerDriver interval must be positive")
        self.interval = interval
        self._on_tick = on_tick
        self._name = name
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start ticking. Calling start() on a running driver does nothing."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, daemon=True, name=self._name)
        self._thread.start()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Signal the driver to stop and wait for its thread to exit."""
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop_event.is_set()

    def _loop(self) -> None:
        # wait() returns True as soon as stop() is called
        while not self._stop_event.wait(self.interval):
            try:
                self._on_tick()
            except Exception:
                logger.exception("Timer tick failed")
