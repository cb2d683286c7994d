"""
Serializer for the Graphite plaintext protocol.

The metric path is built from a template whose parts are tag names or the
keywords ``host``, ``tags``, ``measurement`` and ``field``. ``host`` is taken
from the ``host`` tag; ``tags`` expands to the values of every remaining tag in
key order. Parts referring to missing tags are skipped. Non-numeric field
values are not representable and are skipped.
"""

import re
from typing import List

from ..models.metric import Metric
from .base import Serializer

DEFAULT_TEMPLATE = "host.tags.measurement.field"

_SANITIZE = re.compile(r"[\s/@*]")


def sanitize(text: str) -> str:
    return _SANITIZE.sub("_", text).replace("..", ".")


class GraphiteSerializer(Serializer):
    """Renders each numeric field as ``path value timestamp``."""

    def __init__(self, prefix: str = "", template: str = ""):
        self.prefix = prefix
        self.template = template or DEFAULT_TEMPLATE

    def serialize(self, metric: Metric) -> List[str]:
        timestamp = metric.timestamp_ns() // 10**9
        lines = []
        for field_name in sorted(metric.fields):
            value = metric.fields[field_name]
            if isinstance(value, bool):
                value = int(value)
            elif not isinstance(value, (int, float)):
                continue
            path = self.build_path(metric, field_name)
            lines.append(f"{path} {value} {timestamp}")
        return lines

    def build_path(self, metric: Metric, field_name: str) -> str:
        """Build the dotted path for one field of a metric."""
        tags = dict(metric.tags)
        host = tags.pop("host", "")
        parts = [self.prefix] if self.prefix else []

        for item in self.template.split("."):
            if item == "measurement":
                parts.append(metric.name)
            elif item == "field":
                if field_name != "value":
                    parts.append(field_name)
            elif item == "host":
                if host:
                    parts.append(host)
            elif item == "tags":
                parts.extend(tags.pop(key) for key in sorted(tags))
            elif item in tags:
                parts.append(tags.pop(item))

        return ".".join(sanitize(part) for part in parts if part)
