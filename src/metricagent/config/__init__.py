"""
Configuration loading for the metric agent.

This package walks a parsed configuration document and builds the plugin
instances, per-instance configuration and filters it declares:

- builders: translate one plugin table into typed configuration
- assembler: the Config aggregate and the document walker
- loader: file discovery and parsing
- manager: process-wide cached Config
"""

from .assembler import Config
from .builders import (
    build_aggregator,
    build_filter,
    build_input,
    build_output,
    build_parser,
    build_processor,
    build_serializer,
)
from .loader import get_default_config_path, load_toml_file, parse_file, parse_text
from .manager import (
    clear_config_cache,
    get_config,
    get_config_info,
    is_config_loaded,
    set_config_path,
)
from .unmarshal import unmarshal_table

__all__ = [
    "Config",
    "build_aggregator",
    "build_filter",
    "build_input",
    "build_output",
    "build_parser",
    "build_processor",
    "build_serializer",
    "get_default_config_path",
    "load_toml_file",
    "parse_file",
    "parse_text",
    "clear_config_cache",
    "get_config",
    "get_config_info",
    "is_config_loaded",
    "set_config_path",
    "unmarshal_table",
]
