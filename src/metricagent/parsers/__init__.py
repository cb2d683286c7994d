"""
Data format parsers used by inputs that read arbitrary data.
"""

from .base import ParseError, Parser, ParserConfig
from .factory import PARSER_FORMATS, new_parser
from .graphite import GraphiteParser
from .influx import InfluxParser
from .json import JSONParser
from .value import VALUE_DATA_TYPES, ValueParser

__all__ = [
    "ParseError",
    "Parser",
    "ParserConfig",
    "PARSER_FORMATS",
    "new_parser",
    "GraphiteParser",
    "InfluxParser",
    "JSONParser",
    "VALUE_DATA_TYPES",
    "ValueParser",
]
