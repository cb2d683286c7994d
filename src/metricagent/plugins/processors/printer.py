"""
Processor printing every metric it sees.
"""

from dataclasses import dataclass

from ...serializers import InfluxSerializer
from ..base import Processor


@dataclass
class Printer(Processor):
    """Prints each metric in line protocol and passes it on unchanged."""

    description = "Print all metrics that pass through this filter."

    def __post_init__(self):
        self._serializer = InfluxSerializer()

    def apply(self, *metrics):
        for metric in metrics:
            for line in self._serializer.serialize(metric):
                print(line)
        return list(metrics)
