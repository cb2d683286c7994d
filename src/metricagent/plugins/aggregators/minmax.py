"""
Aggregator keeping the minimum and maximum of every numeric field.
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from ..base import Aggregator


@dataclass
class MinMax(Aggregator):
    """Emits ``<field>_min`` and ``<field>_max`` per series on every push."""

    description = "Keep the aggregate min/max of each metric passing through."

    def __post_init__(self):
        self._cache: Dict[Tuple, Dict[str, Any]] = {}

    def add(self, metric) -> None:
        key = metric.series_key()
        entry = self._cache.setdefault(
            key, {"name": metric.name, "tags": dict(metric.tags), "fields": {}}
        )
        for name, value in metric.fields.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                continue
            value = float(value)
            current = entry["fields"].get(name)
            if current is None:
                entry["fields"][name] = [value, value]
            else:
                current[0] = min(current[0], value)
                current[1] = max(current[1], value)

    def push(self, acc) -> None:
        for entry in self._cache.values():
            fields = {}
            for name, (low, high) in entry["fields"].items():
                fields[f"{name}_min"] = low
                fields[f"{name}_max"] = high
            acc.add_fields(entry["name"], fields, entry["tags"])

    def reset(self) -> None:
        self._cache = {}
