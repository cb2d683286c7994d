"""
Plugin interfaces, registries and built-in plugins.
"""

from .base import (
    Aggregator,
    Input,
    Output,
    ParserInput,
    Processor,
    SerializerOutput,
)
from .registry import PluginRegistry, Registries, create_default_registries

__all__ = [
    "Aggregator",
    "Input",
    "Output",
    "ParserInput",
    "Processor",
    "SerializerOutput",
    "PluginRegistry",
    "Registries",
    "create_default_registries",
]
