"""Tests for logsink.cli module."""

import pytest

from logsink.cli import build_parser, main, resolve_config, ship
from logsink.config import SinkConfig
from logsink.sink import LogSink


def test_resolve_config_overrides(temp_dir):
    path = temp_dir / "logsink.yaml"
    path.write_text("sink:\n  bucket: from-file\n  flush_size: 50\n")

    args = build_parser().parse_args([
        "--config", str(path), "--key", "svc/logs.json", "--flush-size", "5",
    ])
    config = resolve_config(args)

    assert config.bucket == "from-file"
    assert config.flush_size == 5
    assert config.destination_key == "svc/logs.json"
    assert config.backend == "s3"


def test_resolve_config_dry_run(temp_dir):
    path = temp_dir / "logsink.yaml"
    path.write_text("flush_size: 4\n")
    args = build_parser().parse_args(["--config", str(path), "--dry-run"])
    assert resolve_config(args).backend == "memory"


def test_ship_terminates_lines(target):
    sink = LogSink(SinkConfig(flush_size=10, destination_key="k"), target=target)

    count = ship([b"a\n", b"b"], sink)

    assert count == 2
    assert sink.closed
    assert target.read("k") == b"a\nb\n"


def test_main_dry_run(temp_dir, capsys):
    log_file = temp_dir / "app.log"
    log_file.write_bytes(b'{"n": 1}\n{"n": 2}\n{"n": 3}\n')
    config_file = temp_dir / "logsink.yaml"
    config_file.write_text("flush_size: 2\n")

    code = main([
        "--config", str(config_file), "--dry-run", "--key", "dry/logs.json", str(log_file),
    ])

    assert code == 0
    assert capsys.readouterr().out == '{"n": 1}\n{"n": 2}\n{"n": 3}\n'


def test_main_invalid_config(temp_dir):
    config_file = temp_dir / "logsink.yaml"
    config_file.write_text("flush_size: 0\n")

    assert main(["--config", str(config_file), "--dry-run"]) == 2
