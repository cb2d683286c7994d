"""
Unit tests for running wrappers, make_metric and the accumulator.
"""

import math
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from metricagent.models import (
    Accumulator,
    AggregatorConfig,
    Filter,
    InputConfig,
    Metric,
    OutputConfig,
    ProcessorConfig,
    RunningAggregator,
    RunningInput,
    RunningOutput,
    RunningProcessor,
    TagFilter,
    make_metric,
)
from metricagent.models.running import DEFAULT_METRIC_BATCH_SIZE, DEFAULT_METRIC_BUFFER_LIMIT


def metric(name="cpu", **fields):
    return Metric(name=name, tags={"host": "web01"}, fields=fields or {"value": 1.0})


@pytest.mark.unit
class TestMakeMetric:
    """Test cases for make_metric."""

    def test_override_then_prefix_then_suffix(self):
        result = make_metric(
            "cpu", {"usage": 1.0},
            name_override="processor", name_prefix="sys_", name_suffix="_stats",
        )

        assert result.name == "sys_processor_stats"

    def test_plugin_and_global_tags_do_not_overwrite(self):
        result = make_metric(
            "cpu", {"usage": 1.0}, {"host": "metric"},
            plugin_tags={"host": "plugin", "role": "plugin"},
            global_tags={"role": "global", "dc": "global"},
        )

        assert result.tags == {"host": "metric", "role": "plugin", "dc": "global"}

    def test_nan_and_inf_fields_are_dropped(self):
        result = make_metric("cpu", {"a": math.nan, "b": math.inf, "c": 1.0})

        assert result.fields == {"c": 1.0}

    def test_only_unsupported_fields_gives_none(self):
        assert make_metric("cpu", {"a": math.nan}) is None

    def test_empty_name_or_fields_gives_none(self):
        assert make_metric("", {"a": 1}) is None
        assert make_metric("cpu", {}) is None

    def test_filter_is_applied_after_naming(self):
        metric_filter = Filter(name_pass=["sys_*"]).compile()

        assert make_metric("cpu", {"a": 1}, name_prefix="sys_", metric_filter=metric_filter) is not None
        assert make_metric("cpu", {"a": 1}, metric_filter=metric_filter) is None

    def test_filter_can_be_skipped(self):
        metric_filter = Filter(name_drop=["cpu"]).compile()

        assert make_metric("cpu", {"a": 1}, metric_filter=metric_filter, apply_filter=False) is not None


@pytest.mark.unit
class TestRunningInput:
    """Test cases for RunningInput."""

    def test_make_metric_uses_instance_config(self):
        config = InputConfig(name="cpu", name_suffix="_x", tags={"role": "db"})
        running = RunningInput(Mock(), config, {"dc": "east"})

        result = running.make_metric("cpu", {"usage": 1.0})

        assert running.name == "cpu"
        assert result.name == "cpu_x"
        assert result.tags == {"role": "db", "dc": "east"}

    def test_constructor_compiles_filter(self):
        config = InputConfig(name="cpu", filter=Filter(name_pass=["cpu"]))
        RunningInput(Mock(), config)

        assert config.filter.compiled

    def test_global_tags_are_shared(self):
        tags = {}
        running = RunningInput(Mock(), InputConfig(name="cpu"), tags)
        tags["host"] = "late"

        assert running.make_metric("cpu", {"a": 1}).tags == {"host": "late"}


@pytest.mark.unit
class TestRunningOutput:
    """Test cases for RunningOutput buffering."""

    def test_defaults_when_agent_gives_zero(self):
        running = RunningOutput("file", Mock(), OutputConfig(name="file"))

        assert running.metric_batch_size == DEFAULT_METRIC_BATCH_SIZE
        assert running.metric_buffer_limit == DEFAULT_METRIC_BUFFER_LIMIT

    def test_add_metric_filters_a_copy(self):
        config = OutputConfig(name="file", filter=Filter(tag_exclude=["host"]))
        running = RunningOutput("file", Mock(), config)
        original = metric()

        running.add_metric(original)

        assert running.buffered() == 1
        assert original.tags == {"host": "web01"}

    def test_add_metric_drops_rejected(self):
        config = OutputConfig(name="file", filter=Filter(name_drop=["cpu"]))
        running = RunningOutput("file", Mock(), config)

        running.add_metric(metric("cpu"))
        running.add_metric(metric("mem"))

        assert running.buffered() == 1

    def test_buffer_drops_oldest_when_full(self):
        output = Mock()
        running = RunningOutput("file", output, OutputConfig(name="file"),
                                metric_batch_size=10, metric_buffer_limit=2)

        for name in ("a", "b", "c"):
            running.add_metric(metric(name))
        running.write()

        assert running.metrics_dropped == 1
        written = output.write.call_args[0][0]
        assert [m.name for m in written] == ["b", "c"]

    def test_write_in_batches(self):
        output = Mock()
        running = RunningOutput("file", output, OutputConfig(name="file"),
                                metric_batch_size=2, metric_buffer_limit=10)

        for name in ("a", "b", "c"):
            running.add_metric(metric(name))
        running.write()

        assert output.write.call_count == 2
        assert running.buffered() == 0

    def test_flush_when_batch_is_full(self):
        output = Mock()
        running = RunningOutput("file", output, OutputConfig(name="file"),
                                metric_batch_size=2, metric_buffer_limit=10,
                                flush_buffer_when_full=True)

        running.add_metric(metric("a"))
        output.write.assert_not_called()
        running.add_metric(metric("b"))
        output.write.assert_called_once()

    def test_failed_write_keeps_metrics(self):
        output = Mock()
        output.write.side_effect = IOError("disk full")
        running = RunningOutput("file", output, OutputConfig(name="file"))
        running.add_metric(metric("a"))

        with pytest.raises(IOError):
            running.write()

        assert running.buffered() == 1


@pytest.mark.unit
class TestRunningProcessor:
    """Test cases for RunningProcessor."""

    def test_rejected_metrics_pass_through(self):
        processor = Mock()
        processor.apply.side_effect = lambda *ms: [Metric(m.name + "_seen", m.tags, m.fields) for m in ms]
        config = ProcessorConfig(name="printer", filter=Filter(name_pass=["cpu"]))
        running = RunningProcessor("printer", processor, config)

        result = running.apply(metric("cpu"), metric("mem"))

        assert [m.name for m in result] == ["cpu_seen", "mem"]

    def test_without_filter_every_metric_is_processed(self):
        processor = Mock()
        processor.apply.side_effect = lambda *ms: list(ms)
        running = RunningProcessor("printer", processor, ProcessorConfig(name="printer"))

        running.apply(metric("cpu"), metric("mem"))

        assert processor.apply.call_count == 2


@pytest.mark.unit
class TestRunningAggregator:
    """Test cases for RunningAggregator."""

    def test_add_returns_drop_original(self):
        aggregator = Mock()
        running = RunningAggregator(aggregator, AggregatorConfig(name="minmax", drop_original=True))

        assert running.add(metric()) is True
        aggregator.add.assert_called_once()

    def test_filtered_metric_is_not_added(self):
        aggregator = Mock()
        config = AggregatorConfig(
            name="minmax", drop_original=True,
            filter=Filter(tag_pass=[TagFilter("host", ["db*"])]),
        )
        running = RunningAggregator(aggregator, config)

        assert running.add(metric()) is False
        aggregator.add.assert_not_called()

    def test_push_resets(self):
        aggregator = Mock()
        running = RunningAggregator(aggregator, AggregatorConfig(name="minmax"))
        acc = Accumulator(running)

        running.push(acc)

        aggregator.push.assert_called_once_with(acc)
        aggregator.reset.assert_called_once()

    def test_make_metric_applies_naming_without_filter(self):
        config = AggregatorConfig(name="minmax", name_prefix="agg_",
                                  filter=Filter(name_pass=["nothing"]))
        running = RunningAggregator(Mock(), config, {"dc": "east"})

        result = running.make_metric("cpu", {"a_min": 1.0})

        assert result.name == "agg_cpu"
        assert result.tags == {"dc": "east"}


@pytest.mark.unit
class TestAccumulator:
    """Test cases for Accumulator."""

    def test_add_fields_goes_through_wrapper(self):
        running = RunningInput(Mock(), InputConfig(name="cpu", name_prefix="x_"))
        acc = Accumulator(running)

        acc.add_fields("cpu", {"usage": 1.0}, {"cpu": "cpu0"})

        assert len(acc.metrics) == 1
        assert acc.metrics[0].name == "x_cpu"

    def test_timestamps_are_truncated_to_precision(self):
        running = RunningInput(Mock(), InputConfig(name="cpu"))
        acc = Accumulator(running, precision=timedelta(seconds=1))
        when = datetime(2024, 1, 1, 12, 0, 0, 750000, tzinfo=timezone.utc)

        acc.add_fields("cpu", {"usage": 1.0}, timestamp=when)

        assert acc.metrics[0].time == datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def test_add_error_is_logged(self, error_logs):
        running = RunningInput(Mock(), InputConfig(name="exec"))
        acc = Accumulator(running)

        acc.add_error(RuntimeError("boom"))

        assert acc.errors
        assert any("exec" in message and "boom" in message for message in error_logs())
