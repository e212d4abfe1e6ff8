"""
In-memory append target.

Holds objects as bytearrays in process memory with the same offset
semantics as a remote store. Useful for local development and tests.
"""

import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from logsink.errors import ObjectNotFoundError, OffsetMismatchError
from logsink.target import AppendTarget


@dataclass
class StoredObject:
    """An object held by InMemoryAppendTarget."""
    data: bytearray
    content_type: str
    content_disposition: Optional[str] = None


class InMemoryAppendTarget(AppendTarget):
    """Thread-safe dictionary of append-only objects."""

    def __init__(self):
        self._objects: Dict[str, StoredObject] = {}
        self._lock = threading.Lock()
        self.create_calls: List[str] = []
        self.append_calls: List[tuple] = []

    def get_size(self, key: str) -> Optional[int]:
        with self._lock:
            obj = self._objects.get(key)
            return len(obj.data) if obj is not None else None

    def create(
        self,
        key: str,
        content_type: str,
        content_disposition: Optional[str] = None,
    ) -> None:
        with self._lock:
            self.create_calls.append(key)
            self._objects[key] = StoredObject(
                data=bytearray(),
                content_type=content_type,
                content_disposition=content_disposition,
            )

    def append_at(self, key: str, data: bytes, expected_offset: int) -> None:
        with self._lock:
            self.append_calls.append((key, bytes(data), expected_offset))
            obj = self._objects.get(key)
            if obj is None:
                raise ObjectNotFoundError(f"Object {key} does not exist", key=key)
            if len(obj.data) != expected_offset:
                raise OffsetMismatchError(
                    f"Append to {key} expected offset {expected_offset}, "
                    f"object size is {len(obj.data)}",
                    key=key,
                    expected_offset=expected_offset,
                    actual_offset=len(obj.data),
                )
            obj.data.extend(data)

    def read(self, key: str) -> bytes:
        """Return the full content of an object."""
        with self._lock:
            obj = self._objects.get(key)
            if obj is None:
                raise ObjectNotFoundError(f"Object {key} does not exist", key=key)
            return bytes(obj.data)

    def metadata(self, key: str) -> StoredObject:
        with self._lock:
            obj = self._objects.get(key)
            if obj is None:
                raise ObjectNotFoundError(f"Object {key} does not exist", key=key)
            return obj

    def keys(self) -> List[str]:
        with self._lock:
            return sorted(self._objects)
