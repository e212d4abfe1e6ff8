"""
Plain Python demo of logsink.

This example demonstrates:
1. Writing records straight into a LogSink
2. Routing the logging module through LogSinkHandler
3. Reading the appended object back

An in-memory target is used, so no AWS credentials are needed. Swap in
S3AppendTarget (or SinkConfig(backend="s3", bucket=...)) to ship for real.
"""

import logging

from logsink import InMemoryAppendTarget, LogSink, LogSinkHandler, SinkConfig


def main():
    target = InMemoryAppendTarget()
    config = SinkConfig(
        flush_size=3,
        flush_interval=1.0,
        destination_key="demo/logs.json",
    )
    sink = LogSink(config, target=target)

    # Example 1: raw records
    print("Example 1: raw writes")
    for i in range(4):
        sink.write(f'{{"event": "raw", "i": {i}}}\n')
    sink.flush()

    # Example 2: logging integration
    print("Example 2: logging handler")
    app_logger = logging.getLogger("demo.app")
    app_logger.setLevel(logging.INFO)
    handler = LogSinkHandler(sink)
    app_logger.addHandler(handler)

    app_logger.info("order placed", extra={"order_id": 42})
    app_logger.warning("inventory low")

    handler.close()

    # Example 3: read it back
    print("Example 3: object content")
    print(target.read("demo/logs.json").decode("utf-8"))


if __name__ == "__main__":
    main()
