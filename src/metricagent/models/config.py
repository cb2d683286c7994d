"""
Configuration data models.

This module contains the agent-wide settings loaded from the ``[agent]`` table
and the per-instance configuration built for every declared input, output,
processor and aggregator.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, Optional

from .filter import Filter


@dataclass
class AgentConfig:
    """
    Agent-wide settings, loaded from the ``[agent]`` table.
    """

    # Interval at which inputs are gathered.
    interval: timedelta = timedelta(seconds=10)
    # Align collection to multiples of `interval` (:00, :10, :20 ...).
    round_interval: bool = True
    # Timestamp precision; zero means derived from the interval (max 1s).
    precision: timedelta = timedelta(0)
    # Each input sleeps a random time within this jitter before gathering.
    collection_jitter: timedelta = timedelta(0)
    # Interval at which outputs are flushed.
    flush_interval: timedelta = timedelta(seconds=10)
    # Flushes are delayed by a random time within this jitter.
    flush_jitter: timedelta = timedelta(0)
    # Maximum number of metrics written to an output in one call.
    metric_batch_size: int = 1000
    # Maximum number of metrics buffered per output. Should be a multiple of,
    # and at least twice, metric_batch_size.
    metric_buffer_limit: int = 10000
    # Flush an output as soon as its buffer holds a full batch.
    flush_buffer_when_full: bool = True
    # Accepted for old documents; no longer has any effect.
    utc: bool = True
    debug: bool = False
    quiet: bool = False
    # Log destination; empty string means stdout.
    logfile: str = ""
    hostname: str = ""
    omit_hostname: bool = False


@dataclass
class InputConfig:
    """Resolved configuration of one input instance."""

    name: str
    # Overrides the agent interval when set.
    interval: Optional[timedelta] = None
    name_prefix: str = ""
    name_suffix: str = ""
    name_override: str = ""
    tags: Dict[str, str] = field(default_factory=dict)
    filter: Filter = field(default_factory=Filter)


@dataclass
class OutputConfig:
    """Resolved configuration of one output instance."""

    name: str
    filter: Filter = field(default_factory=Filter)


@dataclass
class ProcessorConfig:
    """Resolved configuration of one processor instance."""

    name: str
    filter: Filter = field(default_factory=Filter)


@dataclass
class AggregatorConfig:
    """Resolved configuration of one aggregator instance."""

    name: str
    # When True, metrics accepted by the aggregator are not passed on.
    drop_original: bool = False
    name_prefix: str = ""
    name_suffix: str = ""
    name_override: str = ""
    tags: Dict[str, str] = field(default_factory=dict)
    filter: Filter = field(default_factory=Filter)
