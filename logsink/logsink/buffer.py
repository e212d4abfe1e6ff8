"""
Bounded in-memory buffer of pending log records.
"""

import queue
from typing import List, Optional


class LineBuffer:
    """Bounded FIFO of log records plus the batch being accumulated.

    The queue is filled by the write path and drained only by the active
    flush task, which moves records into the accumulation list before
    appending them to the remote object.
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError("LineBuffer capacity must be positive")
        self.capacity = capacity
        self._queue: "queue.Queue[bytes]" = queue.Queue(maxsize=capacity)
        self._accumulated: List[bytes] = []

    def offer(self, record: bytes) -> bool:
        """Enqueue without blocking. Returns False if the queue is full."""
        try:
            self._queue.put_nowait(record)
        except queue.Full:
            return False
        return True

    def put(self, record: bytes, timeout: Optional[float] = None) -> None:
        """Enqueue, blocking up to timeout seconds. Raises queue.Full on timeout."""
        self._queue.put(record, timeout=timeout)

    def pop(self) -> Optional[bytes]:
        """Dequeue without blocking. Returns None if the queue is empty."""
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def is_full(self) -> bool:
        return self._queue.full()

    def is_empty(self) -> bool:
        return self._queue.empty()

    @property
    def pending_count(self) -> int:
        """Number of records waiting in the queue."""
        return self._queue.qsize()

    def accumulate(self, record: bytes) -> int:
        """Add a record to the current batch and return the batch length."""
        self._accumulated.append(record)
        return len(self._accumulated)

    def take_accumulated(self) -> List[bytes]:
        """Snapshot of the current batch, in write order."""
        return list(self._accumulated)

    def clear_accumulated(self) -> None:
        self._accumulated.clear()

    @property
    def accumulated_count(self) -> int:
        return len(self._accumulated)
