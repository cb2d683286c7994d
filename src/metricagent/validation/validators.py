"""
Value validators and converters.

This module provides the small set of validation functions needed while
translating configuration values: duration strings, booleans and
enumerated choices.
"""

import re
from datetime import timedelta
from typing import Any, List

from .exceptions import ValidationError

# Seconds per unit, as accepted in duration strings such as "1m30s" or "250ms".
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,  # micro sign
    "μs": 1e-6,  # greek mu
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = re.compile(r"(\d+\.?\d*|\.\d+)([a-zµμ]+)")

_TRUE_STRINGS = ("1", "t", "T", "true", "TRUE", "True")
_FALSE_STRINGS = ("0", "f", "F", "false", "FALSE", "False")


def parse_duration(value: Any, field_name: str = "duration") -> timedelta:
    """
    Parse a duration string like "10s", "1.5h" or "2h45m".

    Args:
        value: Duration string to parse
        field_name: Name of the field being validated

    Returns:
        Parsed duration

    Raises:
        ValidationError: If the string is not a valid duration
    """
    if not isinstance(value, str):
        raise ValidationError(
            f"{field_name} must be a duration string, got {value!r}",
            field_name=field_name,
            value=value
        )

    text = value
    sign = 1.0
    if text[:1] in ("+", "-"):
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    if text == "0":
        return timedelta(0)
    if not text:
        raise ValidationError(
            f'{field_name}: invalid duration "{value}"',
            field_name=field_name,
            value=value
        )

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if match is None:
            raise ValidationError(
                f'{field_name}: invalid duration "{value}"',
                field_name=field_name,
                value=value
            )
        unit = _DURATION_UNITS.get(match.group(2))
        if unit is None:
            raise ValidationError(
                f'{field_name}: unknown unit "{match.group(2)}" in duration "{value}"',
                field_name=field_name,
                value=value
            )
        total += float(match.group(1)) * unit
        pos = match.end()

    return timedelta(seconds=sign * total)


def coerce_duration(value: Any, field_name: str = "duration") -> timedelta:
    """
    Convert a loosely typed configuration value into a duration.

    Strings are parsed as duration strings (the empty string is zero), and
    integers or floats are taken as a number of seconds.

    Raises:
        ValidationError: If the value cannot be read as a duration
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a duration, got {value!r}",
            field_name=field_name,
            value=value
        )
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)
    if value == "":
        return timedelta(0)
    return parse_duration(value, field_name=field_name)


def parse_bool(value: Any, field_name: str = "value") -> bool:
    """
    Read a boolean from a TOML boolean or one of the usual string spellings.

    Raises:
        ValidationError: If the value is not a recognizable boolean
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        if value in _TRUE_STRINGS:
            return True
        if value in _FALSE_STRINGS:
            return False
    raise ValidationError(
        f'{field_name}: parsing "{value}": invalid syntax',
        field_name=field_name,
        value=value
    )


def validate_enum_choice(
    value: Any,
    choices: List[str],
    field_name: str = "value",
    case_sensitive: bool = True
) -> str:
    """
    Validate that a value is one of the allowed choices.

    Args:
        value: Value to validate
        choices: List of allowed choices
        field_name: Name of the field being validated
        case_sensitive: Whether the comparison should be case-sensitive

    Returns:
        The matching choice, in the spelling used by ``choices``

    Raises:
        ValidationError: If value is not in choices
    """
    str_value = str(value)

    if case_sensitive:
        if str_value not in choices:
            raise ValidationError(
                f"{field_name} must be one of {choices}, got {value}",
                field_name=field_name,
                value=value
            )
        return str_value

    lower_choices = [choice.lower() for choice in choices]
    lower_value = str_value.lower()
    if lower_value not in lower_choices:
        raise ValidationError(
            f"{field_name} must be one of {choices}, got {value}",
            field_name=field_name,
            value=value
        )
    return choices[lower_choices.index(lower_value)]
