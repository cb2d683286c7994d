"""
Serializer producing one JSON object per metric.
"""

import json
from typing import List

from ..models.metric import Metric
from .base import Serializer


class JSONSerializer(Serializer):
    """Renders ``{"name", "tags", "fields", "timestamp"}`` objects, timestamp in seconds."""

    def serialize(self, metric: Metric) -> List[str]:
        document = {
            "fields": metric.fields,
            "name": metric.name,
            "tags": metric.tags,
            "timestamp": metric.timestamp_ns() // 10**9,
        }
        return [json.dumps(document, sort_keys=True, separators=(",", ":"))]
