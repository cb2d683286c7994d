"""
Serializer for the InfluxDB line protocol.
"""

import math
from typing import Any, List

from ..models.metric import Metric
from .base import SerializeError, Serializer


def _escape_key(text: str) -> str:
    return text.replace(",", "\\,").replace("=", "\\=").replace(" ", "\\ ")


def _escape_name(text: str) -> str:
    return text.replace(",", "\\,").replace(" ", "\\ ")


def format_field_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return f"{value}i"
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise SerializeError(f"unsupported float value {value}")
        return repr(value)
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


class InfluxSerializer(Serializer):
    """Renders metrics as line protocol, tags sorted by key."""

    def serialize(self, metric: Metric) -> List[str]:
        if not metric.fields:
            raise SerializeError(f"metric {metric.name!r} has no fields")
        key = _escape_name(metric.name)
        for tag_key in sorted(metric.tags):
            tag_value = metric.tags[tag_key]
            if tag_value == "":
                continue
            key += f",{_escape_key(tag_key)}={_escape_key(tag_value)}"
        fields = ",".join(
            f"{_escape_key(name)}={format_field_value(value)}"
            for name, value in sorted(metric.fields.items())
        )
        return [f"{key} {fields} {metric.timestamp_ns()}"]
