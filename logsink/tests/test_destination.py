"""Tests for logsink.destination and logsink.clock modules."""

from datetime import datetime, timezone

import pytest

from logsink.clock import SinkClock
from logsink.destination import Destination, content_disposition_for, default_destination_key


def test_default_key_format():
    now = datetime(2023, 11, 9, 4, 59, tzinfo=timezone.utc)
    assert default_destination_key(now) == "2023/November/9/4/logs.json"


def test_configured_key_is_kept(frozen_clock):
    destination = Destination("custom/app.json", clock=frozen_clock)
    assert destination.key == "custom/app.json"
    assert destination.resolve() == "custom/app.json"


def test_empty_key_is_derived(frozen_clock):
    destination = Destination("", clock=frozen_clock)
    assert destination.key is None
    assert destination.resolve() == "2024/March/5/7/logs.json"


def test_key_not_recomputed(frozen_clock):
    destination = Destination(clock=frozen_clock)
    first = destination.resolve()
    frozen_clock.advance(days=1)
    assert destination.resolve() == first


def test_content_disposition():
    assert content_disposition_for("2024/March/5/7/logs.json") == "2024/March/5/7/logs.json.json"


class TestSinkClock:
    def test_naive_freeze_is_utc(self):
        clock = SinkClock(datetime(2024, 1, 1, 12, 0))
        assert clock.now() == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert clock.is_frozen

    def test_unfrozen_clock_is_aware(self):
        clock = SinkClock()
        assert clock.now().tzinfo is not None

    def test_advance_requires_frozen_clock(self):
        with pytest.raises(RuntimeError):
            SinkClock().advance(seconds=1)

    def test_unfreeze(self, frozen_clock):
        frozen_clock.unfreeze()
        assert not frozen_clock.is_frozen
