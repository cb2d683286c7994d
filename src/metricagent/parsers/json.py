"""
Parser for JSON documents.

A document is either one object or an array of objects; each object becomes
one metric named after the plugin. Nested objects and arrays are flattened
into field keys joined with underscores (``{"a": {"b": 1}}`` gives ``a_b``).
Only numeric values become fields. Keys listed in ``tag_keys`` become tags.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..models.metric import Metric
from .base import ParseError, Parser


def flatten_json(value: Any, prefix: str = "", out: Optional[Dict[str, float]] = None) -> Dict[str, float]:
    """Flatten nested JSON into numeric fields."""
    if out is None:
        out = {}
    if isinstance(value, dict):
        for key, item in value.items():
            flatten_json(item, f"{prefix}_{key}" if prefix else str(key), out)
    elif isinstance(value, list):
        for index, item in enumerate(value):
            flatten_json(item, f"{prefix}_{index}" if prefix else str(index), out)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        out[prefix] = float(value)
    return out


class JSONParser(Parser):
    """Parses JSON objects into metrics."""

    def __init__(self, metric_name: str, tag_keys: Optional[List[str]] = None):
        super().__init__()
        self.metric_name = metric_name
        self.tag_keys = list(tag_keys or [])

    def parse(self, buf: bytes) -> List[Metric]:
        try:
            document = json.loads(buf)
        except (ValueError, TypeError) as e:
            raise ParseError(f"invalid JSON: {e}")

        if isinstance(document, dict):
            return [self._parse_object(document)]
        if isinstance(document, list):
            metrics = []
            for item in document:
                if not isinstance(item, dict):
                    raise ParseError("JSON array must contain objects")
                metrics.append(self._parse_object(item))
            return metrics
        raise ParseError("JSON document must be an object or an array of objects")

    def parse_line(self, line: str) -> Metric:
        metrics = self.parse(line.encode("utf-8"))
        if len(metrics) != 1:
            raise ParseError(f"expected one metric from line, got {len(metrics)}")
        return metrics[0]

    def _parse_object(self, document: Dict[str, Any]) -> Metric:
        document = dict(document)
        tags = dict(self.default_tags)
        for key in self.tag_keys:
            value = document.pop(key, None)
            if isinstance(value, bool):
                tags[key] = str(value).lower()
            elif isinstance(value, (str, int, float)):
                tags[key] = str(value)
        return Metric(
            name=self.metric_name,
            tags=tags,
            fields=flatten_json(document),
            time=datetime.now(timezone.utc),
        )
