"""
Logging integration.

LogSinkHandler plugs a LogSink into the standard logging module, writing
each record as one JSON line.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from logsink.sink import LogSink

# LogRecord attributes that are not user-supplied extras
RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "processName", "process", "exc_info", "exc_text",
    "stack_info", "message", "asctime", "taskName",
})


class JsonLineFormatter(logging.Formatter):
    """Formats a LogRecord as a newline-terminated JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        for key, value in record.__dict__.items():
            if key not in RESERVED_ATTRS and not key.startswith("_"):
                entry[key] = value

        return json.dumps(entry, default=str) + "\n"


class LogSinkHandler(logging.Handler):
    """
    Logging handler that writes records to a LogSink.

    Records from logsink's own loggers are ignored so that reporting a
    failed flush cannot feed back into the sink that failed. Records
    emitted on the sink's own flush thread (botocore and urllib3 debug
    output during an append, for example) are ignored for the same reason.
    """

    def __init__(
        self,
        sink: LogSink,
        level=logging.NOTSET,
        close_sink: bool = True,
        formatter: Optional[logging.Formatter] = None,
    ):
        """
        Initialize the handler.

        Args:
            sink: Sink receiving formatted records
            level: Logging level
            close_sink: Close the sink when the handler is closed
            formatter: Defaults to JsonLineFormatter
        """
        super().__init__(level)
        self.sink = sink
        self.close_sink = close_sink
        self.setFormatter(formatter or JsonLineFormatter())

    def emit(self, record: logging.LogRecord) -> None:
        if record.name == "logsink" or record.name.startswith("logsink."):
            return
        if self.sink.coordinator.owns_current_thread():
            return
        try:
            line = self.format(record)
            if not line.endswith("\n"):
                line += "\n"
            self.sink.write(line)
        except Exception:
            self.handleError(record)

    def flush(self) -> None:
        self.sink.flush(timeout=self.sink.config.close_timeout)

    def close(self) -> None:
        try:
            if self.close_sink:
                self.sink.close()
            else:
                self.flush()
        finally:
            super().close()
