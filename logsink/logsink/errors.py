"""
Error types raised by logsink.

Storage errors are raised by AppendTarget implementations and caught by the
flush coordinator; they never reach callers of LogSink.write().
"""

from dataclasses import dataclass
from typing import Optional


class LogSinkError(Exception):
    """Base class for all logsink errors."""


class ConfigError(LogSinkError, ValueError):
    """Invalid sink configuration."""


class AppendTargetError(LogSinkError):
    """A call against the remote object store failed."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class ObjectNotFoundError(AppendTargetError):
    """The named object does not exist."""


class CreateError(AppendTargetError):
    """The named object could not be created."""


class AppendError(AppendTargetError):
    """Appending a block to the named object failed."""


class OffsetMismatchError(AppendError):
    """
    The expected append offset did not match the object's current size.

    Raised instead of writing, so a concurrent or earlier writer's bytes
    are never overwritten.
    """

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        expected_offset: Optional[int] = None,
        actual_offset: Optional[int] = None,
    ):
        super().__init__(message, key=key)
        self.expected_offset = expected_offset
        self.actual_offset = actual_offset


@dataclass
class FlushFailure:
    """A batch that could not be persisted, as reported to on_error callbacks."""
    key: str
    record_count: int
    byte_count: int
    error: Exception


__all__ = [
    "LogSinkError",
    "ConfigError",
    "AppendTargetError",
    "ObjectNotFoundError",
    "CreateError",
    "AppendError",
    "OffsetMismatchError",
    "FlushFailure",
]
