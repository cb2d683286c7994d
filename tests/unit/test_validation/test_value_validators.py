"""
Unit tests for value validators and the error helpers.
"""

import logging
from datetime import timedelta

import pytest

from metricagent.validation import (
    ConfigError,
    ConfigValueError,
    ErrorSeverity,
    ValidationError,
    coerce_duration,
    handle_cli_error,
    handle_config_error,
    handle_error,
    parse_bool,
    parse_duration,
    validate_enum_choice,
)


@pytest.mark.unit
class TestParseDuration:
    """Test cases for duration parsing."""

    @pytest.mark.parametrize("text, expected", [
        ("10s", timedelta(seconds=10)),
        ("1m30s", timedelta(seconds=90)),
        ("1.5h", timedelta(minutes=90)),
        ("250ms", timedelta(milliseconds=250)),
        ("100us", timedelta(microseconds=100)),
        ("0", timedelta(0)),
        ("-5s", timedelta(seconds=-5)),
    ])
    def test_valid_durations(self, text, expected):
        assert parse_duration(text) == expected

    @pytest.mark.parametrize("text", ["", "10", "ten seconds", "5x", "s"])
    def test_invalid_durations(self, text):
        with pytest.raises(ValidationError):
            parse_duration(text, field_name="interval")

    def test_non_string_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_duration(10, field_name="interval")

        assert exc_info.value.field_name == "interval"


@pytest.mark.unit
class TestCoerceDuration:
    """Test cases for loosely typed durations."""

    def test_numbers_are_seconds(self):
        assert coerce_duration(3) == timedelta(seconds=3)
        assert coerce_duration(0.5) == timedelta(milliseconds=500)

    def test_strings_are_parsed(self):
        assert coerce_duration("2m") == timedelta(minutes=2)
        assert coerce_duration("") == timedelta(0)

    def test_booleans_are_rejected(self):
        with pytest.raises(ValidationError):
            coerce_duration(True)


@pytest.mark.unit
class TestParseBool:
    """Test cases for boolean parsing."""

    @pytest.mark.parametrize("value", [True, "true", "True", "TRUE", "t", "1"])
    def test_true_values(self, value):
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", [False, "false", "F", "0"])
    def test_false_values(self, value):
        assert parse_bool(value) is False

    @pytest.mark.parametrize("value", ["notabool", "yes", 1, None])
    def test_invalid_values(self, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_bool(value, field_name="drop_original")

        assert "invalid syntax" in str(exc_info.value)


@pytest.mark.unit
class TestValidateEnumChoice:
    """Test cases for enumerated choices."""

    def test_valid_choice(self):
        assert validate_enum_choice("float", ["integer", "float"]) == "float"

    def test_case_insensitive_returns_canonical_spelling(self):
        assert validate_enum_choice("FLOAT", ["integer", "float"], case_sensitive=False) == "float"

    def test_invalid_choice(self):
        with pytest.raises(ValidationError):
            validate_enum_choice("double", ["integer", "float"], field_name="data_type")


@pytest.mark.unit
class TestErrorHandling:
    """Test cases for ConfigError and the handler helpers."""

    def test_config_error_with_path(self):
        error = ConfigValueError("input cpu: bad interval", plugin="cpu").with_path("/etc/a.conf")

        assert str(error) == "Error parsing /etc/a.conf, input cpu: bad interval"
        assert error.plugin == "cpu"

    def test_with_path_keeps_first_path(self):
        error = ConfigError("boom", path="first.conf").with_path("second.conf")

        assert error.path == "first.conf"

    def test_handle_error_reraises(self):
        with pytest.raises(ValueError):
            handle_error(ValueError("bad"), "testing")

    def test_handle_config_error_logs_without_reraise(self, caplog):
        caplog.set_level(logging.WARNING)
        handle_config_error(ValueError("bad"), "tags", severity=ErrorSeverity.WARNING, reraise=False)

        assert "Error in config tags: bad" in caplog.text

    def test_handle_cli_error_exits(self):
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_error(ValueError("bad"), "loading", exit_code=3)

        assert exc_info.value.code == 3
