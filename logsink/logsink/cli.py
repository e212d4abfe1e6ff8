"""
Ship log lines to object storage.

Reads newline-terminated records from files or stdin and writes them
through a LogSink.

Usage:
    # Ship a file using logsink.yaml from the current directory
    logsink-ship app.log

    # Pipe a process's output
    my-service 2>&1 | logsink-ship --bucket app-logs--use1-az4--x-s3 --key svc/logs.json

    # Try it locally without touching S3
    logsink-ship --dry-run --flush-size 10 app.log
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import IO, Iterable, List, Optional

from logsink.config import SinkConfig, load_config
from logsink.errors import ConfigError, FlushFailure
from logsink.sink import LogSink
from logsink.target import InMemoryAppendTarget

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Append log lines to an object in object storage",
    )
    parser.add_argument(
        "inputs",
        nargs="*",
        type=Path,
        help="Files to ship (default: stdin)",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to logsink.yaml / logsink.json configuration file",
    )
    parser.add_argument(
        "--bucket",
        type=str,
        help="Bucket receiving the log object",
    )
    parser.add_argument(
        "--key",
        type=str,
        help="Destination object key (default: {year}/{month}/{day}/{hour}/logs.json)",
    )
    parser.add_argument(
        "--region",
        type=str,
        help="AWS region",
    )
    parser.add_argument(
        "--endpoint-url",
        type=str,
        help="Endpoint for S3-compatible services",
    )
    parser.add_argument(
        "--flush-size",
        type=int,
        help="Records per batch",
    )
    parser.add_argument(
        "--flush-interval",
        type=float,
        help="Seconds between timed flushes",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Use an in-memory store and print what would be written",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def resolve_config(args: argparse.Namespace) -> SinkConfig:
    """Load the config file and apply command-line overrides."""
    config = load_config(args.config)
    overrides = {
        "bucket": args.bucket,
        "destination_key": args.key,
        "region": args.region,
        "endpoint_url": args.endpoint_url,
        "flush_size": args.flush_size,
        "flush_interval": args.flush_interval,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)
    if args.dry_run:
        config.backend = "memory"
    return config


def iter_lines(inputs: List[Path], stdin: IO[bytes]) -> Iterable[bytes]:
    if not inputs:
        yield from stdin
        return
    for path in inputs:
        with open(path, "rb") as f:
            yield from f


def ship(lines: Iterable[bytes], sink: LogSink) -> int:
    """Write every line to the sink and close it. Returns the line count."""
    count = 0
    with sink:
        for line in lines:
            if not line.endswith(b"\n"):
                line += b"\n"
            sink.write(line)
            count += 1
    return count


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = resolve_config(args)
        target = InMemoryAppendTarget() if args.dry_run else None
        failures: List[FlushFailure] = []
        sink = LogSink(config, target=target, on_error=failures.append)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    count = ship(iter_lines(args.inputs, sys.stdin.buffer), sink)
    logger.info(f"Shipped {count} lines to {sink.destination_key}")

    if args.dry_run and sink.destination_key:
        sys.stdout.write(target.read(sink.destination_key).decode("utf-8", errors="replace"))

    if failures:
        dropped = sum(f.record_count for f in failures)
        logger.error(f"{len(failures)} batches failed, {dropped} lines dropped")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
