"""Unit tests for configuration loading and precedence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from picture_dispatcher.config.env import EnvReader
from picture_dispatcher.config.loader import (
    ConfigError,
    get_config,
    load_config_file,
    parse_config_data,
)
from picture_dispatcher.dispatcher.models import DateFieldRule

EXIF = "%Y:%m:%d %H:%M:%S"


def _minimal(**overrides) -> dict:
    data = {"date_fields": [{"field": "CreateDate", "pattern": EXIF}]}
    data.update(overrides)
    return data


class TestParseConfigData:
    """Tests for parse_config_data()."""

    def test_rule_order_is_preserved(self) -> None:
        config = parse_config_data(
            _minimal(
                date_fields=[
                    {"field": "B", "pattern": "%Y"},
                    {"field": "A", "pattern": "%Y"},
                    {"field": "C", "pattern": "%Y"},
                ]
            )
        )
        assert [rule.field for rule in config.date_fields] == ["B", "A", "C"]
        assert isinstance(config.date_fields, tuple)

    def test_defaults_are_logged(self, caplog) -> None:
        """Missing level and output format fall back with a warning."""
        with caplog.at_level("WARNING"):
            config = parse_config_data(_minimal())

        assert config.logging.level == "info"
        assert config.output_date_format == "%Y_%m"
        assert config.thread_count is None
        assert config.remove_live_videos is True
        assert "No logging level specified" in caplog.text
        assert "No output date format specified" in caplog.text

    def test_camel_case_keys_are_accepted(self) -> None:
        """Configuration files using camelCase keys still load."""
        config = parse_config_data(
            {
                "loggingLevel": "debug",
                "threadCount": 4,
                "outputDateFormat": "%Y-%m",
                "exiftoolPath": "/opt/exiftool",
                "dateFields": [{"field": "CreateDate", "pattern": EXIF}],
            }
        )
        assert config.logging.level == "debug"
        assert config.thread_count == 4
        assert config.output_date_format == "%Y-%m"
        assert config.exiftool_path == Path("/opt/exiftool")
        assert config.date_fields == (DateFieldRule("CreateDate", EXIF),)

    def test_thread_count_below_one_means_cpu_count(self, caplog) -> None:
        with caplog.at_level("WARNING"):
            config = parse_config_data(_minimal(thread_count=0))
        assert config.thread_count is None
        assert "lower than 1" in caplog.text

    def test_empty_date_fields_is_rejected(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            parse_config_data(_minimal(date_fields=[]))
        assert exc_info.value.field == "date_fields"

    def test_missing_date_fields_is_rejected(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            parse_config_data({"logging_level": "info"})
        assert exc_info.value.field == "date_fields"

    def test_pattern_without_directive_is_rejected(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            parse_config_data(
                _minimal(date_fields=[{"field": "CreateDate", "pattern": "2006"}])
            )
        assert exc_info.value.field == "date_fields"
        assert "% directive" in str(exc_info.value)

    def test_unknown_key_is_rejected(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            parse_config_data(_minimal(colour="blue"))
        assert exc_info.value.field == "colour"

    def test_invalid_level_is_rejected(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            parse_config_data(_minimal(logging_level="chatty"))
        assert exc_info.value.field == "logging_level"

    @pytest.mark.parametrize("data", [None, [], "text"])
    def test_non_mapping_is_rejected(self, data) -> None:
        with pytest.raises(ConfigError):
            parse_config_data(data)


class TestLoadConfigFile:
    """Tests for load_config_file()."""

    def test_loads_yaml(self, config_file) -> None:
        config = load_config_file(config_file)
        assert config.thread_count == 2
        assert config.logging.level == "debug"
        assert len(config.date_fields) == 2

    def test_loads_json(self, tmp_path) -> None:
        """JSON configuration files are valid YAML."""
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {
                    "loggingLevel": "info",
                    "threadCount": 3,
                    "dateFields": [{"field": "CreateDate", "pattern": EXIF}],
                    "outputDateFormat": "%Y_%m",
                }
            )
        )
        config = load_config_file(path)
        assert config.thread_count == 3

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config_file(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("date_fields: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config_file(path)

    def test_empty_file(self, tmp_path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(ConfigError, match="empty"):
            load_config_file(path)


class TestGetConfig:
    """Tests for get_config() precedence."""

    def test_file_values_without_overrides(self, config_file) -> None:
        config = get_config(config_file, env_reader=EnvReader(env={}))
        assert config.thread_count == 2
        assert config.logging.level == "debug"

    def test_env_overrides_file(self, config_file, tmp_path) -> None:
        exiftool = tmp_path / "exiftool"
        exiftool.write_text("")
        env = EnvReader(
            env={
                "PICTURE_DISPATCHER_THREAD_COUNT": "7",
                "PICTURE_DISPATCHER_LOG_LEVEL": "error",
                "PICTURE_DISPATCHER_EXIFTOOL_PATH": str(exiftool),
            }
        )
        config = get_config(config_file, env_reader=env)
        assert config.thread_count == 7
        assert config.logging.level == "error"
        assert config.exiftool_path == exiftool

    def test_cli_overrides_env(self, config_file, tmp_path) -> None:
        env = EnvReader(
            env={
                "PICTURE_DISPATCHER_THREAD_COUNT": "7",
                "PICTURE_DISPATCHER_LOG_LEVEL": "error",
            }
        )
        config = get_config(
            config_file,
            thread_count=1,
            log_level="warning",
            log_file=tmp_path / "run.log",
            log_format="json",
            remove_live_videos=False,
            env_reader=env,
        )
        assert config.thread_count == 1
        assert config.logging.level == "warning"
        assert config.logging.file == tmp_path / "run.log"
        assert config.logging.format == "json"
        assert config.remove_live_videos is False

    def test_invalid_env_integer_is_ignored(self, config_file, caplog) -> None:
        env = EnvReader(env={"PICTURE_DISPATCHER_THREAD_COUNT": "many"})
        with caplog.at_level("WARNING"):
            config = get_config(config_file, env_reader=env)
        assert config.thread_count == 2
        assert "Invalid integer value" in caplog.text

    def test_invalid_env_level_is_config_error(self, config_file) -> None:
        env = EnvReader(env={"PICTURE_DISPATCHER_LOG_LEVEL": "loud"})
        with pytest.raises(ConfigError) as exc_info:
            get_config(config_file, env_reader=env)
        assert exc_info.value.field == "logging_level"

    def test_cli_thread_count_below_one(self, config_file) -> None:
        config = get_config(config_file, thread_count=0, env_reader=EnvReader(env={}))
        assert config.thread_count is None
