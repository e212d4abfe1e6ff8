"""Tests for logsink.config module."""

import json
import os

import pytest

from logsink.config import SinkConfig, build_target, load_config
from logsink.errors import ConfigError
from logsink.target import InMemoryAppendTarget, S3AppendTarget


class TestSinkConfig:
    def test_defaults(self):
        config = SinkConfig()
        assert config.flush_size == 100
        assert config.flush_interval == 5.0
        assert config.destination_key is None
        assert config.content_type == "application/json"

    @pytest.mark.parametrize("kwargs, match", [
        ({"flush_size": 0}, "flush_size"),
        ({"flush_size": -5}, "flush_size"),
        ({"flush_interval": 0}, "flush_interval"),
        ({"backend": "azure"}, "backend"),
        ({"backend": "s3", "bucket": ""}, "bucket"),
    ])
    def test_validate_rejects(self, kwargs, match):
        with pytest.raises(ConfigError, match=match):
            SinkConfig(**kwargs).validate()

    def test_validate_without_backend(self):
        assert SinkConfig(backend="s3").validate(check_backend=False)

    def test_from_env(self):
        os.environ["LOGSINK_FLUSH_SIZE"] = "25"
        os.environ["LOGSINK_FLUSH_INTERVAL"] = "2.5"
        os.environ["LOGSINK_BUCKET"] = "app-logs"
        os.environ["LOGSINK_DESTINATION_KEY"] = "svc/logs.json"

        config = SinkConfig.from_env()

        assert config.flush_size == 25
        assert config.flush_interval == 2.5
        assert config.bucket == "app-logs"
        assert config.destination_key == "svc/logs.json"

    def test_from_env_bad_number(self):
        os.environ["LOGSINK_FLUSH_SIZE"] = "lots"
        with pytest.raises(ConfigError):
            SinkConfig.from_env()

    def test_from_dict_ignores_unknown_keys(self):
        config = SinkConfig.from_dict({"flush_size": 7, "colour": "blue"})
        assert config.flush_size == 7


class TestLoadConfig:
    def test_yaml_sink_section(self, temp_dir):
        path = temp_dir / "logsink.yaml"
        path.write_text(
            "sink:\n"
            "  bucket: app-logs\n"
            "  flush_size: 50\n"
            "  flush_interval: 10\n"
            "  endpoint_url: http://localhost:9000\n"
        )

        config = load_config(str(path))

        assert config.bucket == "app-logs"
        assert config.flush_size == 50
        assert config.flush_interval == 10.0
        assert config.endpoint_url == "http://localhost:9000"

    def test_json_top_level(self, temp_dir):
        path = temp_dir / "logsink.json"
        path.write_text(json.dumps({"backend": "memory", "flush_size": 3}))

        config = load_config(str(path))

        assert config.backend == "memory"
        assert config.flush_size == 3

    def test_env_var_path(self, temp_dir):
        path = temp_dir / "custom.yaml"
        path.write_text("flush_size: 9\n")
        os.environ["LOGSINK_CONFIG"] = str(path)

        assert load_config().flush_size == 9

    def test_walks_up_directories(self, temp_dir, monkeypatch):
        (temp_dir / "logsink.yaml").write_text("sink:\n  flush_size: 11\n")
        nested = temp_dir / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        os.environ.pop("LOGSINK_CONFIG", None)

        assert load_config().flush_size == 11

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigError, match="not found"):
            load_config(str(temp_dir / "nope.yaml"))

    def test_invalid_yaml(self, temp_dir):
        path = temp_dir / "logsink.yaml"
        path.write_text("sink: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_non_mapping(self, temp_dir):
        path = temp_dir / "logsink.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(str(path))


class TestBuildTarget:
    def test_memory(self):
        assert isinstance(build_target(SinkConfig(backend="memory")), InMemoryAppendTarget)

    def test_s3(self):
        target = build_target(SinkConfig(
            bucket="app-logs",
            region="eu-west-1",
            endpoint_url="http://localhost:9000",
            read_timeout=3.0,
        ))
        assert isinstance(target, S3AppendTarget)
        assert target.bucket == "app-logs"
        assert target.region == "eu-west-1"
        assert target.endpoint_url == "http://localhost:9000"
        assert target.read_timeout == 3.0
