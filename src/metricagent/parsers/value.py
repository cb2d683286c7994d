"""
Parser for single plain values, such as the output of ``cat /proc/loadavg``.

The last whitespace separated token of the buffer is converted according to
``data_type`` and stored in the field ``value``.
"""

from datetime import datetime, timezone
from typing import List

from ..models.metric import Metric
from ..validation import ValidationError, parse_bool
from .base import ParseError, Parser

VALUE_DATA_TYPES = ["integer", "long", "float", "string", "boolean"]


class ValueParser(Parser):
    """Parses a single value into a metric with one ``value`` field."""

    def __init__(self, metric_name: str, data_type: str):
        super().__init__()
        self.metric_name = metric_name
        self.data_type = data_type

    def parse(self, buf: bytes) -> List[Metric]:
        text = buf.decode("utf-8") if isinstance(buf, (bytes, bytearray)) else buf
        tokens = text.strip("\x00").split()
        if not tokens:
            return []
        # Non-string types only keep the last token.
        raw = text.strip() if self.data_type == "string" else tokens[-1]
        return [self.parse_line(raw)]

    def parse_line(self, line: str) -> Metric:
        return Metric(
            name=self.metric_name,
            tags=dict(self.default_tags),
            fields={"value": self._convert(line.strip())},
            time=datetime.now(timezone.utc),
        )

    def _convert(self, raw: str):
        try:
            if self.data_type in ("integer", "long"):
                return int(raw)
            if self.data_type == "float":
                return float(raw)
            if self.data_type == "boolean":
                return parse_bool(raw, field_name="value")
        except (ValueError, ValidationError) as e:
            raise ParseError(f"cannot read {raw!r} as {self.data_type}: {e}")
        return raw
