"""
metricagent - a plugin-driven metrics collection agent.

This package turns a TOML configuration document into running plugin
instances: inputs gathering metrics, processors and aggregators transforming
them and outputs writing them. Every instance carries its own naming
overrides, tags and a compiled metric filter.

The package is organized into specialized modules:
- config: Document walking, per-plugin builders and the Config aggregate
- models: Metrics, filters, plugin configuration and running wrappers
- filter: Glob pattern compilation
- parsers / serializers: Data formats read by inputs and written by outputs
- plugins: Plugin interfaces, registries and built-in plugins
- validation: Value validation and error handling
- cli: Command-line interface

Usage:
    From command line:
        metricagent --config metricagent.conf --test

    Programmatically:
        from metricagent import Config
        config = Config()
        config.load_config("metricagent.conf")
"""

__version__ = "0.3.0"

from .config import Config
from .models import Filter, Metric, TagFilter
from .plugins import Registries, create_default_registries

__all__ = [
    "Config",
    "Filter",
    "Metric",
    "TagFilter",
    "Registries",
    "create_default_registries",
    "__version__",
]
