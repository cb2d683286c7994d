"""
Metric data model.

A metric is one measurement at one point in time: a name, a set of string
tags identifying the series, and one or more typed field values.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Metric:
    """
    A single measurement produced by an input or aggregator.

    Attributes:
        name: Measurement name (e.g. "cpu").
        tags: Tag key to tag value; identifies the series.
        fields: Field key to value (int, float, bool or str).
        time: Timestamp of the measurement, timezone aware.
    """

    name: str
    tags: Dict[str, str] = field(default_factory=dict)
    fields: Dict[str, Any] = field(default_factory=dict)
    time: datetime = field(default_factory=_utcnow)

    def copy(self) -> "Metric":
        """Return a copy whose tag and field maps can be modified freely."""
        return Metric(
            name=self.name,
            tags=dict(self.tags),
            fields=dict(self.fields),
            time=self.time,
        )

    def timestamp_ns(self) -> int:
        """Timestamp as integer nanoseconds since the epoch."""
        delta = self.time - datetime(1970, 1, 1, tzinfo=timezone.utc)
        return (delta.days * 86400 + delta.seconds) * 10**9 + delta.microseconds * 1000

    def series_key(self) -> tuple:
        """Hashable identity of the series this metric belongs to."""
        return (self.name, tuple(sorted(self.tags.items())))
