"""
Data models for the metric agent.

Configuration Models:
- Agent-wide settings from the [agent] table
- Per-instance configuration for inputs, outputs, processors and aggregators
- Metric filters and their matching rules

Runtime Models:
- Metrics
- Running wrappers pairing plugin instances with their configuration
- Accumulators collecting the metrics an input or aggregator emits
"""

# Configuration models
from .config import (
    AgentConfig,
    AggregatorConfig,
    InputConfig,
    OutputConfig,
    ProcessorConfig,
)
from .filter import Filter, TagFilter

# Runtime models
from .metric import Metric
from .running import (
    Accumulator,
    RunningAggregator,
    RunningInput,
    RunningOutput,
    RunningProcessor,
    make_metric,
)

__all__ = [
    # Configuration
    "AgentConfig",
    "InputConfig",
    "OutputConfig",
    "ProcessorConfig",
    "AggregatorConfig",
    "Filter",
    "TagFilter",
    # Runtime
    "Metric",
    "Accumulator",
    "RunningInput",
    "RunningOutput",
    "RunningProcessor",
    "RunningAggregator",
    "make_metric",
]
