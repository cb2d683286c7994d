"""
Factory for creating parser instances.
"""

import logging

from ..validation import ValidationError, validate_enum_choice
from .base import Parser, ParserConfig
from .graphite import GraphiteParser
from .influx import InfluxParser
from .json import JSONParser
from .value import VALUE_DATA_TYPES, ValueParser

logger = logging.getLogger(__name__)

PARSER_FORMATS = ["influx", "json", "value", "graphite"]


def new_parser(config: ParserConfig) -> Parser:
    """
    Create a parser for the configured data format.

    Args:
        config: Parser options; ``data_format`` selects the parser

    Returns:
        Parser instance with the configured default tags applied

    Raises:
        ValueError: If the data format is unknown or its options are invalid
    """
    if config.data_format == "influx":
        parser = InfluxParser()
    elif config.data_format == "json":
        parser = JSONParser(config.metric_name, config.tag_keys)
    elif config.data_format == "value":
        try:
            data_type = validate_enum_choice(
                config.data_type, VALUE_DATA_TYPES, field_name="data_type"
            )
        except ValidationError as e:
            raise ValueError(str(e))
        parser = ValueParser(config.metric_name, data_type)
    elif config.data_format == "graphite":
        parser = GraphiteParser(config.separator, config.templates)
    else:
        raise ValueError(f"Invalid data format: {config.data_format}")

    logger.debug(f"Created {config.data_format} parser for '{config.metric_name}'")
    parser.set_default_tags(config.default_tags)
    return parser
