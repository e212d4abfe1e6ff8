"""
FlushCoordinator - Single-flight drain of the line buffer.

Architecture:
    request_flush() → IDLE→FLUSHING → drain thread → append_to_remote() → IDLE

At most one drain task runs at a time. Flush requests that arrive while
a drain is running are dropped; the running drain keeps going until it
observes an empty queue, so the records those requests were meant for
are still picked up.

Every append carries the object size observed just before it as the
expected offset. The store rejects the append if the object grew in the
meantime, so a racing writer can cause a batch to be dropped but never
cause bytes to be overwritten.
"""

import logging
import threading
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from logsink.buffer import LineBuffer
from logsink.clock import SinkClock, system_clock
from logsink.destination import Destination, content_disposition_for
from logsink.errors import (
    AppendTargetError,
    CreateError,
    FlushFailure,
    OffsetMismatchError,
)
from logsink.target import AppendTarget

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[FlushFailure], None]


class FlushState(Enum):
    IDLE = "idle"
    FLUSHING = "flushing"


class FlushCoordinator:
    """
    Drains a LineBuffer into an AppendTarget, one flush at a time.

    The IDLE/FLUSHING transition happens under a lock, and a drain only
    returns to IDLE while holding that lock and seeing an empty queue.
    """

    def __init__(
        self,
        buffer: LineBuffer,
        target: AppendTarget,
        destination: Destination,
        flush_size: int,
        content_type: str = "application/json",
        clock: Optional[SinkClock] = None,
        on_error: Optional[ErrorCallback] = None,
        thread_name: str = "logsink-flush",
    ):
        """
        Initialize the coordinator.

        Args:
            buffer: Buffer to drain
            target: Remote store receiving appended blocks
            destination: Destination key holder
            flush_size: Batch size that triggers an append mid-drain
            content_type: Content-Type used when creating the object
            clock: Clock for last_flush_time
            on_error: Called with a FlushFailure whenever a batch is dropped
            thread_name: Name of drain threads
        """
        self._buffer = buffer
        self._target = target
        self._destination = destination
        self.flush_size = flush_size
        self.content_type = content_type
        self._clock = clock or system_clock
        self._on_error = on_error
        self._thread_name = thread_name

        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._state = FlushState.IDLE
        # Marks the thread currently running this coordinator's drain
        self._local = threading.local()

        self.last_flush_time: Optional[datetime] = None
        self.flush_count = 0
        self.append_count = 0
        self.failed_batches = 0

    @property
    def state(self) -> FlushState:
        with self._lock:
            return self._state

    @property
    def in_flight(self) -> bool:
        return self.state is FlushState.FLUSHING

    def owns_current_thread(self) -> bool:
        """True when called from inside this coordinator's drain, e.g. by a
        log record emitted by the target during an append."""
        return getattr(self._local, "draining", False)

    def request_flush(self) -> bool:
        """
        Start a drain task unless one is already running (non-blocking).

        Returns:
            True if a new drain task was started
        """
        with self._lock:
            if self._state is FlushState.FLUSHING:
                return False
            self._state = FlushState.FLUSHING
            self.flush_count += 1

        thread = threading.Thread(target=self._run, daemon=True, name=self._thread_name)
        try:
            thread.start()
        except RuntimeError:
            # Interpreter shutdown refuses new threads
            logger.warning("Could not start flush thread, flushing inline")
            self._run()
        return True

    def flush_inline(self, timeout: Optional[float] = None) -> bool:
        """
        Drain in the calling thread.

        Waits for any running drain to finish first.

        Returns:
            False if the running drain did not finish within timeout
        """
        with self._idle:
            if not self._idle.wait_for(lambda: self._state is FlushState.IDLE, timeout=timeout):
                return False
            self._state = FlushState.FLUSHING
            self.flush_count += 1
        self._run()
        return True

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until no drain is running. Returns False on timeout."""
        with self._idle:
            return self._idle.wait_for(lambda: self._state is FlushState.IDLE, timeout=timeout)

    def _set_idle(self) -> None:
        # Caller holds self._lock
        self._state = FlushState.IDLE
        self._idle.notify_all()

    def _run(self) -> None:
        self._local.draining = True
        try:
            while True:
                self._drain()
                with self._lock:
                    if self._buffer.is_empty():
                        self._set_idle()
                        return
        except Exception:
            logger.exception("Flush task failed")
            with self._lock:
                self._set_idle()
        finally:
            self._local.draining = False

    def _drain(self) -> None:
        """Move queued records into batches until the queue is empty."""
        while True:
            record = self._buffer.pop()
            if record is None:
                break
            if self._buffer.accumulate(record) >= self.flush_size:
                self.append_to_remote(self._buffer.take_accumulated())

        if self._buffer.accumulated_count:
            self.append_to_remote(self._buffer.take_accumulated())

    def append_to_remote(self, records: List[bytes]) -> bool:
        """
        Append a batch of records to the destination object.

        Creates the object when it does not exist yet. The batch is never
        retried: on failure it is reported and dropped. The accumulated
        batch is cleared in every case.

        Args:
            records: Records to concatenate, in write order

        Returns:
            True if the block was appended
        """
        key = self._destination.resolve()
        block = b"".join(records)

        try:
            offset = self._target.get_size(key)
            if offset is None:
                self._target.create(
                    key,
                    content_type=self.content_type,
                    content_disposition=content_disposition_for(key),
                )
                offset = 0
            self._target.append_at(key, block, offset)
        except OffsetMismatchError as e:
            logger.warning(
                f"Dropped {len(records)} records for {key}: append offset {e.expected_offset} "
                f"did not match object size"
            )
            self._report(key, records, block, e)
            return False
        except CreateError as e:
            logger.error(f"Failed to create {key}, dropped {len(records)} records: {e}")
            self._report(key, records, block, e)
            return False
        except AppendTargetError as e:
            logger.error(f"Failed to append {len(records)} records to {key}: {e}")
            self._report(key, records, block, e)
            return False
        except Exception as e:
            logger.exception(f"Unexpected error appending {len(records)} records to {key}")
            self._report(key, records, block, e)
            return False
        finally:
            self._buffer.clear_accumulated()
            self.last_flush_time = self._clock.now()

        self.append_count += 1
        logger.debug(f"Appended {len(records)} records ({len(block)} bytes) to {key} at offset {offset}")
        return True

    def _report(self, key: str, records: List[bytes], block: bytes, error: Exception) -> None:
        self.failed_batches += 1
        if self._on_error is None:
            return
        failure = FlushFailure(
            key=key,
            record_count=len(records),
            byte_count=len(block),
            error=error,
        )
        try:
            self._on_error(failure)
        except Exception:
            logger.exception("on_error callback raised")
