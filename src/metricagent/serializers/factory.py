"""
Factory for creating serializer instances.
"""

import logging

from .base import Serializer, SerializerConfig
from .graphite import GraphiteSerializer
from .influx import InfluxSerializer
from .json import JSONSerializer

logger = logging.getLogger(__name__)

SERIALIZER_FORMATS = ["influx", "json", "graphite"]


def new_serializer(config: SerializerConfig) -> Serializer:
    """
    Create a serializer for the configured data format.

    Args:
        config: Serializer options; ``data_format`` selects the serializer

    Returns:
        Serializer instance

    Raises:
        ValueError: If the data format is unknown
    """
    if config.data_format == "influx":
        serializer = InfluxSerializer()
    elif config.data_format == "json":
        serializer = JSONSerializer()
    elif config.data_format == "graphite":
        serializer = GraphiteSerializer(config.prefix, config.template)
    else:
        raise ValueError(f"Invalid data format: {config.data_format}")

    logger.debug(f"Created {config.data_format} serializer")
    return serializer
