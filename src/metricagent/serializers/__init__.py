"""
Output serializers used by outputs that write arbitrary data formats.
"""

from .base import SerializeError, Serializer, SerializerConfig
from .factory import SERIALIZER_FORMATS, new_serializer
from .graphite import GraphiteSerializer
from .influx import InfluxSerializer
from .json import JSONSerializer

__all__ = [
    "SerializeError",
    "Serializer",
    "SerializerConfig",
    "SERIALIZER_FORMATS",
    "new_serializer",
    "GraphiteSerializer",
    "InfluxSerializer",
    "JSONSerializer",
]
