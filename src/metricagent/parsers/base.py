"""
Abstract base class and configuration for data format parsers.

Inputs that can read arbitrary data (exec and similar) delegate decoding to a
Parser selected by the instance's ``data_format`` option. ParserConfig carries
the options that select and parameterize the parser.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List

from ..models.metric import Metric


class ParseError(ValueError):
    """Raised when input data cannot be decoded by a parser."""


@dataclass
class ParserConfig:
    """
    Options selecting and parameterizing a parser.

    Attributes:
        data_format: Name of the data format ("influx", "json", "value", "graphite")
        separator: Graphite separator used to join measurement and field parts
        templates: Graphite templates
        tag_keys: JSON keys whose values become tags instead of fields
        data_type: Value type for the "value" format
        metric_name: Measurement name for formats that do not carry one
        default_tags: Tags added to every parsed metric
    """

    data_format: str = ""
    separator: str = ""
    templates: List[str] = field(default_factory=list)
    tag_keys: List[str] = field(default_factory=list)
    data_type: str = ""
    metric_name: str = ""
    default_tags: Dict[str, str] = field(default_factory=dict)


class Parser(ABC):
    """Abstract base class for data format parsers."""

    def __init__(self):
        self.default_tags: Dict[str, str] = {}

    @abstractmethod
    def parse(self, buf: bytes) -> List[Metric]:
        """
        Decode a buffer into metrics.

        Raises:
            ParseError: If the buffer is malformed
        """

    @abstractmethod
    def parse_line(self, line: str) -> Metric:
        """
        Decode a single line into one metric.

        Raises:
            ParseError: If the line is malformed
        """

    def set_default_tags(self, tags: Dict[str, str]) -> None:
        """Set tags added to every metric unless the data carries them."""
        self.default_tags = dict(tags)

    def _with_default_tags(self, tags: Dict[str, str]) -> Dict[str, str]:
        merged = dict(self.default_tags)
        merged.update(tags)
        return merged
