"""
Running wrappers that pair a live plugin instance with its configuration.

The configuration loader creates one wrapper per declared plugin instance and
the aggregate Config owns them for the life of the process. Wrappers apply the
per-instance naming overrides, tags and filter around the plugin calls.
"""

import logging
import math
import threading
from collections import deque
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from .config import AggregatorConfig, InputConfig, OutputConfig, ProcessorConfig
from .filter import Filter
from .metric import Metric

logger = logging.getLogger(__name__)

DEFAULT_METRIC_BATCH_SIZE = 1000
DEFAULT_METRIC_BUFFER_LIMIT = 10000


def make_metric(
    measurement: str,
    fields: Dict[str, Any],
    tags: Optional[Dict[str, str]] = None,
    name_override: str = "",
    name_prefix: str = "",
    name_suffix: str = "",
    plugin_tags: Optional[Dict[str, str]] = None,
    global_tags: Optional[Dict[str, str]] = None,
    metric_filter: Optional[Filter] = None,
    apply_filter: bool = True,
    timestamp: Optional[datetime] = None,
) -> Optional[Metric]:
    """
    Build a metric, applying the per-instance naming, tags and filter.

    The name override is applied first, then the prefix and the suffix. Plugin
    tags and then global tags are added only where the metric does not already
    carry the key. NaN and infinite float fields are dropped.

    Returns:
        The metric, or None if it has no name, no fields, or was filtered out
    """
    if not measurement or not fields:
        return None

    tags = dict(tags or {})
    fields = dict(fields)

    if name_override:
        measurement = name_override
    if name_prefix:
        measurement = name_prefix + measurement
    if name_suffix:
        measurement = measurement + name_suffix

    for key, value in (plugin_tags or {}).items():
        tags.setdefault(key, value)
    for key, value in (global_tags or {}).items():
        tags.setdefault(key, value)

    if apply_filter and metric_filter is not None:
        if not metric_filter.apply(measurement, fields, tags):
            return None

    for key in list(fields):
        value = fields[key]
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            logger.debug(f"Dropping field {key} of {measurement}: unsupported value {value}")
            del fields[key]
    if not fields:
        return None

    return Metric(
        name=measurement,
        tags=tags,
        fields=fields,
        time=timestamp or datetime.now(timezone.utc),
    )


class RunningInput:
    """
    An input plugin together with its resolved InputConfig.
    """

    def __init__(self, input_plugin, config: InputConfig,
                 global_tags: Optional[Dict[str, str]] = None):
        """
        Args:
            input_plugin: The configured input instance
            config: Resolved configuration of the instance
            global_tags: Tags added to every metric; normally the tag map of
                the Config that owns this wrapper
        """
        self.input = input_plugin
        self.config = config
        self.global_tags = global_tags if global_tags is not None else {}
        config.filter.compile()

    @property
    def name(self) -> str:
        return self.config.name

    def make_metric(self, measurement: str, fields: Dict[str, Any],
                    tags: Optional[Dict[str, str]] = None,
                    timestamp: Optional[datetime] = None) -> Optional[Metric]:
        return make_metric(
            measurement,
            fields,
            tags,
            name_override=self.config.name_override,
            name_prefix=self.config.name_prefix,
            name_suffix=self.config.name_suffix,
            plugin_tags=self.config.tags,
            global_tags=self.global_tags,
            metric_filter=self.config.filter,
            timestamp=timestamp,
        )


class RunningOutput:
    """
    An output plugin with its configuration and a bounded metric buffer.

    Metrics accepted by the output filter are buffered; when the buffer is
    full the oldest metrics are dropped. write() hands the buffer to the
    plugin in batches of at most metric_batch_size metrics.
    """

    def __init__(self, name: str, output, config: OutputConfig,
                 metric_batch_size: int = 0, metric_buffer_limit: int = 0,
                 flush_buffer_when_full: bool = False):
        self.name = name
        self.output = output
        self.config = config
        self.metric_batch_size = metric_batch_size or DEFAULT_METRIC_BATCH_SIZE
        self.metric_buffer_limit = metric_buffer_limit or DEFAULT_METRIC_BUFFER_LIMIT
        self.flush_buffer_when_full = flush_buffer_when_full
        self.metrics_dropped = 0
        self._buffer: deque = deque(maxlen=self.metric_buffer_limit)
        self._lock = threading.Lock()
        config.filter.compile()

    def add_metric(self, metric: Metric) -> None:
        """Filter and buffer one metric; the caller's metric is not modified."""
        metric = metric.copy()
        if not self.config.filter.apply(metric.name, metric.fields, metric.tags):
            return

        with self._lock:
            if len(self._buffer) == self.metric_buffer_limit:
                self.metrics_dropped += 1
            self._buffer.append(metric)
            batch_ready = len(self._buffer) >= self.metric_batch_size

        if batch_ready and self.flush_buffer_when_full:
            self.write()

    def buffered(self) -> int:
        with self._lock:
            return len(self._buffer)

    def write(self) -> None:
        """
        Write all buffered metrics in batches.

        If the plugin raises, the failed batch is returned to the front of the
        buffer and the exception propagates.
        """
        while True:
            with self._lock:
                if not self._buffer:
                    return
                batch = [self._buffer.popleft()
                         for _ in range(min(self.metric_batch_size, len(self._buffer)))]
            try:
                self.output.write(batch)
            except Exception as e:
                logger.error(f"Error writing to output [{self.name}]: {e}")
                with self._lock:
                    # Newer metrics win if the re-queued batch no longer fits.
                    room = self.metric_buffer_limit - len(self._buffer)
                    for metric in reversed(batch[-room:] if room > 0 else []):
                        self._buffer.appendleft(metric)
                raise
            logger.debug(f"Wrote batch of {len(batch)} metrics to output [{self.name}]")


class RunningProcessor:
    """A processor plugin with its configuration."""

    def __init__(self, name: str, processor, config: ProcessorConfig):
        self.name = name
        self.processor = processor
        self.config = config
        config.filter.compile()

    def apply(self, *metrics: Metric) -> List[Metric]:
        """
        Run the processor on the metrics its filter accepts.

        Metrics the filter rejects are passed through unchanged.
        """
        result: List[Metric] = []
        for metric in metrics:
            if self.config.filter.is_active():
                candidate = metric.copy()
                if not self.config.filter.apply(candidate.name, candidate.fields, candidate.tags):
                    result.append(metric)
                    continue
                metric = candidate
            result.extend(self.processor.apply(metric))
        return result


class RunningAggregator:
    """An aggregator plugin with its configuration."""

    def __init__(self, aggregator, config: AggregatorConfig,
                 global_tags: Optional[Dict[str, str]] = None):
        self.aggregator = aggregator
        self.config = config
        self.global_tags = global_tags if global_tags is not None else {}
        config.filter.compile()

    @property
    def name(self) -> str:
        return self.config.name

    def make_metric(self, measurement: str, fields: Dict[str, Any],
                    tags: Optional[Dict[str, str]] = None,
                    timestamp: Optional[datetime] = None) -> Optional[Metric]:
        # The filter already ran on the way in, see add().
        return make_metric(
            measurement,
            fields,
            tags,
            name_override=self.config.name_override,
            name_prefix=self.config.name_prefix,
            name_suffix=self.config.name_suffix,
            plugin_tags=self.config.tags,
            global_tags=self.global_tags,
            apply_filter=False,
            timestamp=timestamp,
        )

    def add(self, metric: Metric) -> bool:
        """
        Offer a metric to the aggregator.

        Returns:
            True if the original metric should be dropped from the pipeline
        """
        if self.config.filter.is_active():
            metric = metric.copy()
            if not self.config.filter.apply(metric.name, metric.fields, metric.tags):
                return False
        self.aggregator.add(metric)
        return self.config.drop_original

    def push(self, acc: "Accumulator") -> None:
        self.aggregator.push(acc)
        self.aggregator.reset()


class Accumulator:
    """
    Collects the metrics emitted by one input or aggregator.

    Metrics are routed through the owning wrapper's make_metric so that
    naming, tags and filtering are applied. Timestamps are truncated to the
    configured precision.
    """

    def __init__(self, maker, precision: timedelta = timedelta(0)):
        self.maker = maker
        self.precision = precision
        self.metrics: List[Metric] = []
        self.errors: List[Exception] = []

    def add_fields(self, measurement: str, fields: Dict[str, Any],
                   tags: Optional[Dict[str, str]] = None,
                   timestamp: Optional[datetime] = None) -> None:
        timestamp = self._round(timestamp or datetime.now(timezone.utc))
        metric = self.maker.make_metric(measurement, fields, tags, timestamp=timestamp)
        if metric is not None:
            self.metrics.append(metric)

    def add_metric(self, metric: Metric) -> None:
        self.add_fields(metric.name, metric.fields, metric.tags, metric.time)

    def add_error(self, error: Exception) -> None:
        self.errors.append(error)
        logger.error(f"Error in plugin [{self.maker.name}]: {error}")

    def _round(self, timestamp: datetime) -> datetime:
        step = self.precision.total_seconds()
        if step <= 0:
            return timestamp
        epoch = datetime(1970, 1, 1, tzinfo=timestamp.tzinfo)
        elapsed = (timestamp - epoch).total_seconds()
        return epoch + timedelta(seconds=math.floor(elapsed / step) * step)
