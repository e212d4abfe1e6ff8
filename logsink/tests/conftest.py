"""Pytest fixtures for logsink tests."""

import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path

import pytest

from logsink.clock import SinkClock
from logsink.config import SinkConfig
from logsink.errors import CreateError
from logsink.sink import LogSink, set_default_sink
from logsink.target import InMemoryAppendTarget


class BlockingTarget(InMemoryAppendTarget):
    """In-memory target whose appends wait until release() is called."""

    def __init__(self):
        super().__init__()
        self.entered = threading.Event()
        self._gate = threading.Event()

    def release(self):
        self._gate.set()

    def append_at(self, key, data, expected_offset):
        self.entered.set()
        self._gate.wait(timeout=5.0)
        super().append_at(key, data, expected_offset)


class FailingCreateTarget(InMemoryAppendTarget):
    """In-memory target that cannot create objects."""

    def create(self, key, content_type, content_disposition=None):
        self.create_calls.append(key)
        raise CreateError(f"create denied for {key}", key=key)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def target():
    """Create an empty in-memory append target."""
    return InMemoryAppendTarget()


@pytest.fixture
def frozen_clock():
    """A clock frozen at 2024-03-05 07:30 UTC."""
    return SinkClock(datetime(2024, 3, 5, 7, 30, tzinfo=timezone.utc))


@pytest.fixture
def make_sink(target):
    """Factory for LogSinks that are closed after the test."""
    sinks = []

    def _make(flush_size=3, flush_interval=3600.0, destination_key="app/logs.json", **kwargs):
        config = SinkConfig(
            flush_size=flush_size,
            flush_interval=flush_interval,
            destination_key=destination_key,
            close_timeout=5.0,
        )
        kwargs.setdefault("target", target)
        sink = LogSink(config, **kwargs)
        sinks.append(sink)
        return sink

    yield _make

    for sink in sinks:
        sink.close()


@pytest.fixture(autouse=True)
def reset_env():
    """Reset environment variables and the default sink after each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)
    set_default_sink(None)
