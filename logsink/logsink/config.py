"""
Configuration for logsink.

Sinks are configured with a SinkConfig, built directly, from LOGSINK_*
environment variables, or from a logsink.yaml / logsink.json file.
"""

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from logsink.errors import ConfigError
from logsink.target import AppendTarget, InMemoryAppendTarget, S3AppendTarget

BACKENDS = ("s3", "memory")
CONFIG_FILENAMES = ("logsink.yaml", "logsink.yml", "logsink.json")


@dataclass
class SinkConfig:
    """Configuration for LogSink."""
    flush_size: int = 100  # Queue capacity and batch size
    flush_interval: float = 5.0  # Seconds between timer flushes
    destination_key: Optional[str] = None  # Derived from time if unset
    backend: str = "s3"
    bucket: str = ""
    region: str = "us-east-1"
    endpoint_url: Optional[str] = None  # For S3-compatible services
    profile: Optional[str] = None
    connect_timeout: float = 5.0
    read_timeout: float = 30.0
    close_timeout: float = 30.0  # Max wait for the final flush on close
    content_type: str = "application/json"

    def validate(self, check_backend: bool = True) -> "SinkConfig":
        """
        Check the configuration.

        Args:
            check_backend: Also check the backend settings. Skipped when
                the caller supplies its own AppendTarget.

        Raises:
            ConfigError: If a value is out of range or missing
        """
        if not isinstance(self.flush_size, int) or self.flush_size <= 0:
            raise ConfigError(f"flush_size must be a positive integer, got {self.flush_size!r}")
        if self.flush_interval <= 0:
            raise ConfigError(f"flush_interval must be positive, got {self.flush_interval!r}")
        if not check_backend:
            return self
        if self.backend not in BACKENDS:
            raise ConfigError(f"backend must be one of {BACKENDS}, got {self.backend!r}")
        if self.backend == "s3" and not self.bucket:
            raise ConfigError("bucket is required for the s3 backend")
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SinkConfig":
        """Build a config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known and v is not None}
        try:
            config = cls(**values)
            config.flush_size = int(config.flush_size)
            config.flush_interval = float(config.flush_interval)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid sink configuration: {e}") from e
        return config

    @classmethod
    def from_env(cls) -> "SinkConfig":
        """Create config from environment variables."""
        env = {
            "flush_size": os.environ.get("LOGSINK_FLUSH_SIZE"),
            "flush_interval": os.environ.get("LOGSINK_FLUSH_INTERVAL"),
            "destination_key": os.environ.get("LOGSINK_DESTINATION_KEY") or None,
            "backend": os.environ.get("LOGSINK_BACKEND"),
            "bucket": os.environ.get("LOGSINK_BUCKET"),
            "region": os.environ.get("LOGSINK_REGION") or os.environ.get("AWS_REGION"),
            "endpoint_url": os.environ.get("LOGSINK_ENDPOINT_URL") or None,
            "profile": os.environ.get("LOGSINK_PROFILE") or None,
        }
        return cls.from_dict(env)


def load_config(config_path: Optional[str] = None) -> SinkConfig:
    """
    Load configuration from a logsink config file.

    Search order:
    1. Provided config_path
    2. LOGSINK_CONFIG environment variable
    3. logsink.yaml / logsink.yml / logsink.json in the current directory
    4. The same names in parent directories (walk up the tree)

    Settings are read from the file's ``sink`` section, or from the top
    level if there is none.

    Args:
        config_path: Optional explicit path to config file

    Returns:
        SinkConfig instance (defaults if no file is found)
    """
    if config_path:
        return _load_from_path(Path(config_path))

    env_path = os.environ.get("LOGSINK_CONFIG")
    if env_path:
        return _load_from_path(Path(env_path))

    current = Path.cwd()
    while True:
        for name in CONFIG_FILENAMES:
            config_file = current / name
            if config_file.exists():
                return _load_from_path(config_file)

        # Stop at filesystem root
        if current == current.parent:
            break
        current = current.parent

    return SinkConfig()


def _load_from_path(path: Path) -> SinkConfig:
    """Load config from a specific path"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not parse {path}: {e}") from e

    data = data or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping")
    section = data.get("sink", data)
    if not isinstance(section, dict):
        raise ConfigError(f"'sink' section of {path} must be a mapping")
    return SinkConfig.from_dict(section)


def build_target(config: SinkConfig) -> AppendTarget:
    """Create the AppendTarget selected by config.backend."""
    config.validate()
    if config.backend == "memory":
        return InMemoryAppendTarget()
    return S3AppendTarget(
        bucket=config.bucket,
        region=config.region,
        endpoint_url=config.endpoint_url,
        profile=config.profile,
        connect_timeout=config.connect_timeout,
        read_timeout=config.read_timeout,
    )
