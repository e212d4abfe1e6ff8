"""
LogSink - Buffered, append-only log sink.

Writes must never add storage latency to the caller. Records are queued
in memory and appended to a remote object in batches.

Architecture:
    write() → LineBuffer → FlushCoordinator (queue full / timer tick) → AppendTarget

Components:
    LineBuffer: bounded queue of pending records (buffer.py)
    FlushCoordinator: single-flight drain + offset-checked append (coordinator.py)
    TimerDriver: per-sink periodic flush requests (timer.py)
"""

import atexit
import logging
import queue
import threading
from datetime import datetime
from typing import Optional, Union

from logsink.buffer import LineBuffer
from logsink.clock import SinkClock, system_clock
from logsink.config import SinkConfig, build_target
from logsink.coordinator import ErrorCallback, FlushCoordinator
from logsink.destination import Destination
from logsink.target import AppendTarget
from logsink.timer import TimerDriver

logger = logging.getLogger(__name__)

# Seconds a writer waits for room before re-requesting a flush
WRITE_RETRY_INTERVAL = 0.05


class LogSink:
    """
    Buffered sink that appends log records to one remote object.

    Features:
        - write() never raises storage errors and returns the input length
        - Flush when the queue fills up, and every flush_interval seconds
        - One flush at a time; concurrent requests coalesce
        - Offset-checked appends never overwrite existing bytes
        - close() stops the timer and flushes what is left

    Usage:
        sink = LogSink(SinkConfig(bucket="app-logs", flush_size=50))
        sink.write('{"msg": "hello"}\\n')
        sink.close()
    """

    def __init__(
        self,
        config: Optional[SinkConfig] = None,
        target: Optional[AppendTarget] = None,
        clock: Optional[SinkClock] = None,
        on_error: Optional[ErrorCallback] = None,
        start_timer: bool = True,
    ):
        """
        Initialize the LogSink.

        Args:
            config: Sink configuration. If None, uses defaults from env.
            target: Append target. If None, built from config.backend.
            clock: Clock for destination keys and flush timestamps
            on_error: Called with a FlushFailure when a batch is dropped
            start_timer: Start the periodic flush timer immediately
        """
        self.config = config or SinkConfig.from_env()
        if target is None:
            target = build_target(self.config)
        else:
            self.config.validate(check_backend=False)

        self.target = target
        self._clock = clock or system_clock
        self._destination = Destination(self.config.destination_key, clock=self._clock)
        self._buffer = LineBuffer(self.config.flush_size)
        self._coordinator = FlushCoordinator(
            buffer=self._buffer,
            target=target,
            destination=self._destination,
            flush_size=self.config.flush_size,
            content_type=self.config.content_type,
            clock=self._clock,
            on_error=on_error,
        )
        self._timer = TimerDriver(
            interval=self.config.flush_interval,
            on_tick=self._coordinator.request_flush,
        )
        self._close_lock = threading.Lock()
        self._closed = False
        self._dropped_count = 0

        if start_timer:
            self._timer.start()

        # Flush remaining records on interpreter exit
        atexit.register(self.close)

    def write(self, data: Union[bytes, str]) -> int:
        """
        Queue one log record.

        Records are concatenated verbatim, so each should carry its own
        terminator (usually a trailing newline).

        A flush is requested by the write that fills the queue, not by the
        next write after it. After close() each write is flushed inline.
        Called from inside this sink's own flush, a write never blocks: if
        the queue is full the record is dropped and counted in dropped_count.

        Args:
            data: The record; str is encoded as UTF-8

        Returns:
            len(data)
        """
        record = data.encode("utf-8") if isinstance(data, str) else bytes(data)

        if self._coordinator.owns_current_thread():
            # The drain cannot wait for itself to make room
            if not self._buffer.offer(record):
                self._dropped_count += 1
            return len(data)

        if self._closed:
            self._write_after_close(record)
            return len(data)

        if not self._buffer.offer(record):
            # Queue full: drain what is queued, then wait for room
            self._coordinator.request_flush()
            while True:
                try:
                    self._buffer.put(record, timeout=WRITE_RETRY_INTERVAL)
                    break
                except queue.Full:
                    self._coordinator.request_flush()

        if self._buffer.is_full():
            self._coordinator.request_flush()

        return len(data)

    def _write_after_close(self, record: bytes) -> None:
        # No timer or atexit hook is left to pick the record up later
        timeout = self.config.close_timeout
        if not self._buffer.offer(record):
            self._coordinator.flush_inline(timeout=timeout)
            if not self._buffer.offer(record):
                self._dropped_count += 1
                logger.warning("LogSink is closed and its queue is full, record dropped")
                return
        if not self._coordinator.flush_inline(timeout=timeout):
            logger.warning(
                f"LogSink write after close timed out with {self.pending_count} records not flushed"
            )

    def flush(self, timeout: Optional[float] = None) -> bool:
        """
        Flush queued records and wait for the flush to finish (blocking).

        Returns:
            False if the flush did not finish within timeout
        """
        self._coordinator.request_flush()
        return self._coordinator.wait_idle(timeout)

    def close(self, timeout: Optional[float] = None) -> None:
        """
        Stop the timer and flush remaining records.

        The final flush runs in the calling thread. Calling close() more
        than once has no further effect.
        """
        with self._close_lock:
            if self._closed:
                return
            self._closed = True

        if timeout is None:
            timeout = self.config.close_timeout

        self._timer.stop(timeout=timeout)
        if not self._coordinator.flush_inline(timeout=timeout):
            logger.warning(
                f"LogSink close timed out with {self.pending_count} records not flushed"
            )
        atexit.unregister(self.close)

    @property
    def destination_key(self) -> Optional[str]:
        """Destination key, or None until the first flush derives it."""
        return self._destination.key

    @property
    def pending_count(self) -> int:
        """Number of records written but not yet handed to the target."""
        return self._buffer.pending_count + self._buffer.accumulated_count

    @property
    def dropped_count(self) -> int:
        """Number of records dropped because they could not be queued."""
        return self._dropped_count

    @property
    def last_flush_time(self) -> Optional[datetime]:
        return self._coordinator.last_flush_time

    @property
    def coordinator(self) -> FlushCoordinator:
        return self._coordinator

    @property
    def timer(self) -> TimerDriver:
        return self._timer

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "LogSink":
        return self

    def __exit__(self, *args) -> None:
        self.close()


# Global default sink instance
_default_sink: Optional[LogSink] = None
_sink_lock = threading.Lock()


def get_default_sink() -> Optional[LogSink]:
    """Get the default LogSink instance, if one has been set."""
    with _sink_lock:
        return _default_sink


def set_default_sink(sink: Optional[LogSink]) -> None:
    """
    Set the default LogSink instance.

    The previous default sink is closed.

    Args:
        sink: The sink to use, or None to clear
    """
    global _default_sink

    with _sink_lock:
        if _default_sink is not None and _default_sink is not sink:
            _default_sink.close()
        _default_sink = sink


def init_sink(
    config: Optional[SinkConfig] = None,
    target: Optional[AppendTarget] = None,
    on_error: Optional[ErrorCallback] = None,
) -> LogSink:
    """
    Initialize and set the default sink.

    Args:
        config: Sink configuration. If None, uses defaults from env.
        target: Append target. If None, built from config.backend.
        on_error: Called with a FlushFailure when a batch is dropped

    Returns:
        The configured LogSink
    """
    sink = LogSink(config, target=target, on_error=on_error)
    set_default_sink(sink)
    return sink
