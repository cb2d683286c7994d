"""
Abstract base class and configuration for output serializers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from ..models.metric import Metric


class SerializeError(ValueError):
    """Raised when a metric cannot be represented in the output format."""


@dataclass
class SerializerConfig:
    """
    Options selecting and parameterizing a serializer.

    Attributes:
        data_format: Name of the data format ("influx", "json", "graphite")
        prefix: Graphite path prefix
        template: Graphite path template
    """

    data_format: str = ""
    prefix: str = ""
    template: str = ""


class Serializer(ABC):
    """Abstract base class for serializers."""

    @abstractmethod
    def serialize(self, metric: Metric) -> List[str]:
        """
        Render one metric as output lines, without trailing newlines.

        Raises:
            SerializeError: If the metric cannot be rendered
        """
