"""
Defines the abstract interfaces every plugin category implements.

This module provides:
- Input, Output, Processor, Aggregator: one abstract base class per plugin
  category.
- ParserInput, SerializerOutput: optional capabilities. A plugin that inherits
  one of them accepts a pluggable parser or serializer, and the configuration
  loader builds and attaches one after instantiating the plugin.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from ..models.metric import Metric
    from ..models.running import Accumulator
    from ..parsers.base import Parser
    from ..serializers.base import Serializer


class Input(ABC):
    """
    Abstract base class for input plugins.

    Inputs gather metrics on every collection interval and hand them to the
    accumulator, which applies the instance's naming, tags and filter.
    """

    description: str = ""

    @abstractmethod
    def gather(self, acc: "Accumulator") -> None:
        """Collect one round of metrics into the accumulator."""


class Output(ABC):
    """Abstract base class for output plugins."""

    description: str = ""

    def connect(self) -> None:
        """Open any connection or file the output needs."""

    def close(self) -> None:
        """Release resources held by the output."""

    @abstractmethod
    def write(self, metrics: List["Metric"]) -> None:
        """Write one batch of metrics."""


class Processor(ABC):
    """Abstract base class for processor plugins."""

    description: str = ""

    @abstractmethod
    def apply(self, *metrics: "Metric") -> List["Metric"]:
        """Transform metrics, returning the metrics to pass on."""


class Aggregator(ABC):
    """
    Abstract base class for aggregator plugins.

    Aggregators see every metric accepted by their filter through add(), emit
    their aggregates through push() and are then reset().
    """

    description: str = ""

    @abstractmethod
    def add(self, metric: "Metric") -> None:
        """Account for one metric."""

    @abstractmethod
    def push(self, acc: "Accumulator") -> None:
        """Emit the current aggregates."""

    @abstractmethod
    def reset(self) -> None:
        """Forget all aggregates."""


class ParserInput(ABC):
    """Capability of inputs that read data through a configurable parser."""

    @abstractmethod
    def set_parser(self, parser: "Parser") -> None:
        """Attach the parser selected by `data_format`."""


class SerializerOutput(ABC):
    """Capability of outputs that write data through a configurable serializer."""

    @abstractmethod
    def set_serializer(self, serializer: "Serializer") -> None:
        """Attach the serializer selected by `data_format`."""
