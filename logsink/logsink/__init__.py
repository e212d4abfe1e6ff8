"""
logsink - Buffered append-only log sink for object storage

This package provides:
- A buffered LogSink that batches log records in memory
- Single-flight flushing on a full buffer or a timer tick
- Offset-checked appends to S3 (or an in-memory store)
- A logging.Handler that writes JSON lines through a LogSink
"""

from logsink.errors import (
    LogSinkError,
    ConfigError,
    AppendTargetError,
    ObjectNotFoundError,
    CreateError,
    AppendError,
    OffsetMismatchError,
    FlushFailure,
)
from logsink.clock import SinkClock
from logsink.config import SinkConfig, load_config, build_target
from logsink.destination import default_destination_key
from logsink.target import AppendTarget, InMemoryAppendTarget, S3AppendTarget
from logsink.buffer import LineBuffer
from logsink.coordinator import FlushCoordinator, FlushState
from logsink.timer import TimerDriver
from logsink.sink import LogSink, init_sink, get_default_sink, set_default_sink
from logsink.handler import LogSinkHandler, JsonLineFormatter

__version__ = "0.1.0"

__all__ = [
    # Errors
    "LogSinkError",
    "ConfigError",
    "AppendTargetError",
    "ObjectNotFoundError",
    "CreateError",
    "AppendError",
    "OffsetMismatchError",
    "FlushFailure",
    # Clock
    "SinkClock",
    # Config
    "SinkConfig",
    "load_config",
    "build_target",
    "default_destination_key",
    # Targets
    "AppendTarget",
    "InMemoryAppendTarget",
    "S3AppendTarget",
    # Core
    "LineBuffer",
    "FlushCoordinator",
    "FlushState",
    "TimerDriver",
    # Sink
    "LogSink",
    "init_sink",
    "get_default_sink",
    "set_default_sink",
    # Logging
    "LogSinkHandler",
    "JsonLineFormatter",
]
