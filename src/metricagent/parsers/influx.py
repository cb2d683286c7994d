"""
Parser for the InfluxDB line protocol.

Each line has the form::

    measurement[,tag=value...] field=value[,field=value...] [timestamp_ns]

Integers carry an ``i`` suffix, strings are double quoted, and commas, spaces
and equals signs in names are escaped with a backslash.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

from ..models.metric import Metric
from .base import ParseError, Parser

_TRUE_VALUES = ("t", "T", "true", "True", "TRUE")
_FALSE_VALUES = ("f", "F", "false", "False", "FALSE")


def _split(text: str, separator: str, honor_quotes: bool = False) -> List[str]:
    """Split on a separator that is neither escaped nor inside quotes."""
    parts = []
    current = []
    in_quotes = False
    index = 0
    while index < len(text):
        ch = text[index]
        if ch == "\\" and index + 1 < len(text):
            current.append(text[index:index + 2])
            index += 2
            continue
        if honor_quotes and ch == '"':
            in_quotes = not in_quotes
        if ch == separator and not in_quotes:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
        index += 1
    if in_quotes:
        raise ParseError(f"unterminated string in {text!r}")
    parts.append("".join(current))
    return parts


def _unescape(text: str) -> str:
    for escaped in ("\\,", "\\=", "\\ ", '\\"'):
        text = text.replace(escaped, escaped[1])
    return text


def _parse_field_value(raw: str) -> Any:
    if not raw:
        raise ParseError("missing field value")
    if raw[0] == '"':
        if len(raw) < 2 or raw[-1] != '"':
            raise ParseError(f"invalid string field value {raw!r}")
        return raw[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    try:
        if raw.endswith("i"):
            return int(raw[:-1])
        return float(raw)
    except ValueError:
        raise ParseError(f"invalid field value {raw!r}")


def _timestamp_from_ns(ns: int) -> datetime:
    seconds, remainder = divmod(ns, 10**9)
    return datetime.fromtimestamp(seconds, tz=timezone.utc) + timedelta(microseconds=remainder // 1000)


class InfluxParser(Parser):
    """Parses line protocol into metrics."""

    def parse(self, buf: bytes) -> List[Metric]:
        text = buf.decode("utf-8") if isinstance(buf, (bytes, bytearray)) else buf
        metrics = []
        for line in text.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            metrics.append(self.parse_line(line))
        return metrics

    def parse_line(self, line: str) -> Metric:
        sections = [s for s in _split(line.strip(), " ", honor_quotes=True) if s]
        if len(sections) not in (2, 3):
            raise ParseError(f"invalid line protocol: {line!r}")

        key_parts = _split(sections[0], ",")
        name = _unescape(key_parts[0])
        if not name:
            raise ParseError(f"missing measurement name: {line!r}")

        tags: Dict[str, str] = {}
        for part in key_parts[1:]:
            pair = _split(part, "=")
            if len(pair) != 2 or not pair[0]:
                raise ParseError(f"invalid tag {part!r}")
            tags[_unescape(pair[0])] = _unescape(pair[1])

        fields: Dict[str, Any] = {}
        for part in _split(sections[1], ",", honor_quotes=True):
            pair = _split(part, "=", honor_quotes=True)
            if len(pair) != 2 or not pair[0]:
                raise ParseError(f"invalid field {part!r}")
            fields[_unescape(pair[0])] = _parse_field_value(pair[1])

        if len(sections) == 3:
            try:
                timestamp = _timestamp_from_ns(int(sections[2]))
            except ValueError:
                raise ParseError(f"invalid timestamp {sections[2]!r}")
        else:
            timestamp = datetime.now(timezone.utc)

        return Metric(name=name, tags=self._with_default_tags(tags), fields=fields, time=timestamp)
