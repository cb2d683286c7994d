"""
Parser for the Graphite plaintext protocol.

Lines look like ``servers.host01.cpu.load 0.52 1465839830``. Templates map the
dot separated parts of the metric path onto the measurement name, tags and
field name::

    templates = [
        "cpu.* measurement.measurement.field region=us-west",
        "host.measurement.field*",
    ]

A template entry is ``[filter] template [default_tags]``. The first entry whose
filter matches the path is used; an entry without a filter is the default.
Template parts:

- ``measurement``: part of the measurement name
- ``field``: part of the field name (the field is ``value`` otherwise)
- ``measurement*`` / ``field*``: this and every following part
- an empty part skips the path element
- anything else: a tag name
"""

import math
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from ..filter import GlobError, compile_glob
from ..models.metric import Metric
from .base import ParseError, Parser

DEFAULT_SEPARATOR = "."
DEFAULT_TEMPLATE = "measurement*"


class GraphiteTemplate:
    """One compiled template entry."""

    def __init__(self, pattern: str, default_tags: Optional[Dict[str, str]] = None,
                 separator: str = DEFAULT_SEPARATOR, path_filter: str = ""):
        self.parts = pattern.split(".")
        self.default_tags = dict(default_tags or {})
        self.separator = separator
        self.path_filter = path_filter
        self._matcher = compile_glob(path_filter) if path_filter else None

        greedy = [p for p in self.parts if p.endswith("*")]
        if len(greedy) > 1:
            raise ValueError(f"template {pattern!r} may contain only one wildcard part")
        if greedy and self.parts[-1] not in ("measurement*", "field*"):
            raise ValueError(f"wildcard must be the last part of template {pattern!r}")

    def matches(self, path: str) -> bool:
        return self._matcher is None or self._matcher.match(path)

    def apply(self, path: str) -> Tuple[str, Dict[str, str], str]:
        """Split a metric path into measurement, tags and field name."""
        elements = path.split(".")
        measurement: List[str] = []
        field_parts: List[str] = []
        tag_values: Dict[str, List[str]] = {}

        for index, part in enumerate(self.parts):
            if index >= len(elements):
                break
            if part == "":
                continue
            if part == "measurement":
                measurement.append(elements[index])
            elif part == "field":
                field_parts.append(elements[index])
            elif part == "measurement*":
                measurement.extend(elements[index:])
                break
            elif part == "field*":
                field_parts.extend(elements[index:])
                break
            else:
                tag_values.setdefault(part, []).append(elements[index])

        tags = dict(self.default_tags)
        for key, values in tag_values.items():
            tags[key] = self.separator.join(values)

        name = self.separator.join(measurement) if measurement else path
        return name, tags, self.separator.join(field_parts)


def _parse_tag_spec(spec: str) -> Dict[str, str]:
    tags = {}
    for item in spec.split(","):
        key, sep, value = item.partition("=")
        if not sep or not key or not value:
            raise ValueError(f"invalid template tags {spec!r}")
        tags[key] = value
    return tags


def parse_template_entry(entry: str, separator: str) -> GraphiteTemplate:
    """Build a template from one ``[filter] template [tags]`` entry."""
    parts = entry.split()
    path_filter, tag_spec = "", ""
    if len(parts) == 1:
        template = parts[0]
    elif len(parts) == 2:
        if "=" in parts[1]:
            template, tag_spec = parts
        else:
            path_filter, template = parts
    elif len(parts) == 3:
        path_filter, template, tag_spec = parts
    else:
        raise ValueError(f"invalid template {entry!r}")

    tags = _parse_tag_spec(tag_spec) if tag_spec else {}
    try:
        return GraphiteTemplate(template, tags, separator, path_filter)
    except GlobError as e:
        raise ValueError(f"invalid template filter in {entry!r}: {e}")


class GraphiteParser(Parser):
    """Parses Graphite plaintext lines using templates."""

    def __init__(self, separator: str = "", templates: Optional[List[str]] = None):
        super().__init__()
        self.separator = separator or DEFAULT_SEPARATOR
        self.templates: List[GraphiteTemplate] = []
        self.default_template = GraphiteTemplate(DEFAULT_TEMPLATE, separator=self.separator)
        for entry in templates or []:
            template = parse_template_entry(entry, self.separator)
            if template.path_filter:
                self.templates.append(template)
            else:
                self.default_template = template

    def parse(self, buf: bytes) -> List[Metric]:
        text = buf.decode("utf-8") if isinstance(buf, (bytes, bytearray)) else buf
        return [self.parse_line(line) for line in text.splitlines() if line.strip()]

    def parse_line(self, line: str) -> Metric:
        elements = line.split()
        if len(elements) < 2:
            raise ParseError(f"received {line!r} which doesn't have required fields")

        path = elements[0]
        try:
            value = float(elements[1])
        except ValueError:
            raise ParseError(f"field {path!r} value: unable to parse {elements[1]!r}")
        if math.isnan(value) or math.isinf(value):
            raise ParseError(f"field {path!r} value: {elements[1]!r} is unsupported")

        timestamp = datetime.now(timezone.utc)
        if len(elements) > 2 and elements[2] != "-1":
            try:
                timestamp = datetime.fromtimestamp(float(elements[2]), tz=timezone.utc)
            except (ValueError, OverflowError):
                raise ParseError(f"field {path!r} time: unable to parse {elements[2]!r}")

        template = self._template_for(path)
        name, tags, field_name = template.apply(path)
        return Metric(
            name=name,
            tags=self._with_default_tags(tags),
            fields={field_name or "value": value},
            time=timestamp,
        )

    def _template_for(self, path: str) -> GraphiteTemplate:
        for template in self.templates:
            if template.matches(path):
                return template
        return self.default_template
