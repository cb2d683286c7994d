"""
Unit tests for the per-plugin configuration builders.

Every builder must remove exactly the keys it recognizes, leaving only the
plugin's own options in the table.
"""

from datetime import timedelta
from unittest.mock import Mock

import pytest

from metricagent.config import (
    build_aggregator,
    build_filter,
    build_input,
    build_output,
    build_parser,
    build_processor,
    build_serializer,
)
from metricagent.models import TagFilter
from metricagent.parsers import ParserConfig, new_parser
from metricagent.serializers import SerializerConfig, new_serializer
from metricagent.validation import CodecError, ConfigValueError, FilterCompileError


def filter_keys():
    return {
        "namepass": ["cpu*"],
        "namedrop": ["cpu_guest"],
        "fieldpass": ["usage_*"],
        "pass": ["time_*"],
        "fielddrop": ["usage_steal"],
        "drop": ["time_steal"],
        "tagpass": {"cpu": ["cpu0", "cpu1"], "host": ["web*"]},
        "tagdrop": {"env": ["dev"]},
        "tagexclude": ["secret"],
        "taginclude": ["cpu", "host"],
    }


@pytest.mark.unit
class TestBuildFilter:
    """Test cases for the filter builder."""

    def test_extracts_every_criterion(self):
        table = {**filter_keys(), "percpu": True}

        metric_filter = build_filter(table)

        assert table == {"percpu": True}
        assert metric_filter.compiled
        assert metric_filter.name_pass == ("cpu*",)
        assert metric_filter.name_drop == ("cpu_guest",)
        assert metric_filter.field_pass == ("time_*", "usage_*")
        assert metric_filter.field_drop == ("time_steal", "usage_steal")
        assert metric_filter.tag_pass == (
            TagFilter("cpu", ["cpu0", "cpu1"]),
            TagFilter("host", ["web*"]),
        )
        assert metric_filter.tag_drop == (TagFilter("env", ["dev"]),)
        assert metric_filter.tag_exclude == ("secret",)
        assert metric_filter.tag_include == ("cpu", "host")

    def test_wrong_shapes_are_ignored(self):
        """Test that a filter key with an unexpected shape is dropped silently."""
        table = {
            "namepass": "cpu",
            "fielddrop": {"a": "b"},
            "tagpass": ["cpu"],
            "tagdrop": {"env": "dev", "region": ["eu-*"]},
            "taginclude": 5,
        }

        metric_filter = build_filter(table)

        assert table == {}
        assert metric_filter.name_pass == ()
        assert metric_filter.field_drop == ()
        assert metric_filter.tag_pass == ()
        assert metric_filter.tag_drop == (TagFilter("region", ["eu-*"]),)
        assert metric_filter.tag_include == ()

    def test_empty_table_gives_inactive_filter(self):
        assert not build_filter({}).is_active()

    def test_invalid_glob(self):
        with pytest.raises(FilterCompileError):
            build_filter({"namepass": ["cpu[0"]})


@pytest.mark.unit
class TestBuildInput:
    """Test cases for the input builder."""

    def test_recognized_keys_are_removed(self):
        table = {
            "interval": "30s",
            "name_prefix": "sys_",
            "name_suffix": "_x",
            "name_override": "processor",
            "tags": {"role": "db"},
            "namepass": ["cpu"],
            "percpu": False,
            "totalcpu": True,
        }

        config = build_input("cpu", table)

        assert set(table) == {"percpu", "totalcpu"}
        assert config.name == "cpu"
        assert config.interval == timedelta(seconds=30)
        assert config.name_prefix == "sys_"
        assert config.name_suffix == "_x"
        assert config.name_override == "processor"
        assert config.tags == {"role": "db"}
        assert config.filter.compiled
        assert config.filter.name_pass == ("cpu",)

    def test_invalid_interval_is_fatal(self):
        with pytest.raises(ConfigValueError) as exc_info:
            build_input("cpu", {"interval": "often"})

        assert "cpu" in str(exc_info.value)
        assert exc_info.value.plugin == "cpu"

    def test_interval_of_wrong_shape_is_ignored(self):
        table = {"interval": 10}

        assert build_input("cpu", table).interval is None
        assert table == {}

    def test_tag_key_filters_are_allowed(self):
        config = build_input("cpu", {"tagexclude": ["cpu"], "taginclude": ["host"]})

        assert config.filter.tag_exclude == ("cpu",)
        assert config.filter.tag_include == ("host",)

    def test_non_string_tags_are_logged(self, error_logs):
        config = build_input("cpu", {"tags": {"role": "db", "rack": 4}})

        assert config.tags == {"role": "db"}
        assert any("tags for input cpu" in message for message in error_logs())

    def test_invalid_glob_names_plugin(self):
        with pytest.raises(FilterCompileError) as exc_info:
            build_input("mem", {"namedrop": ["{a,b"]})

        assert "mem" in str(exc_info.value)
        assert "namedrop" in str(exc_info.value)


@pytest.mark.unit
class TestBuildOutput:
    """Test cases for the output builder."""

    def test_field_filters_become_name_filters(self):
        table = {"fieldpass": ["cpu"], "fielddrop": ["mem"], "namepass": ["ignored"], "urls": ["x"]}

        config = build_output("file", table)

        assert table == {"urls": ["x"]}
        assert config.filter.name_pass == ("cpu",)
        assert config.filter.name_drop == ("mem",)
        assert config.filter.field_pass == ()
        assert config.filter.field_drop == ()

    def test_drop_alias_equivalence(self):
        """Test that fielddrop and its older spelling remap the same way."""
        with_new = build_output("file", {"fielddrop": ["temp"]})
        with_old = build_output("file", {"drop": ["temp"]})

        assert with_new.filter.name_drop == with_old.filter.name_drop == ("temp",)

    def test_name_filters_kept_without_field_filters(self):
        config = build_output("file", {"namepass": ["cpu"]})

        assert config.filter.name_pass == ("cpu",)


@pytest.mark.unit
class TestBuildProcessor:
    """Test cases for the processor builder."""

    def test_only_filter_keys_are_removed(self):
        table = {"namepass": ["cpu"], "taginclude": ["host"], "order": 1}

        config = build_processor("printer", table)

        assert table == {"order": 1}
        assert config.name == "printer"
        assert config.filter.name_pass == ("cpu",)


@pytest.mark.unit
class TestBuildAggregator:
    """Test cases for the aggregator builder."""

    def test_recognized_keys_are_removed(self):
        table = {
            "drop_original": True,
            "name_prefix": "agg_",
            "name_suffix": "_s",
            "name_override": "stats",
            "tags": {"agg": "minmax"},
            "namepass": ["cpu"],
            "period": "30s",
        }

        config = build_aggregator("minmax", table)

        assert set(table) == {"period"}
        assert config.drop_original is True
        assert config.name_prefix == "agg_"
        assert config.name_suffix == "_s"
        assert config.name_override == "stats"
        assert config.tags == {"agg": "minmax"}

    def test_string_boolean_is_accepted(self):
        assert build_aggregator("minmax", {"drop_original": "true"}).drop_original is True

    def test_malformed_drop_original_is_logged(self, error_logs):
        table = {"drop_original": "notabool"}

        config = build_aggregator("minmax", table)

        assert config.drop_original is False
        assert table == {}
        assert any("minmax" in message for message in error_logs())


@pytest.mark.unit
class TestBuildParser:
    """Test cases for the parser builder."""

    def test_exec_defaults_to_json(self):
        factory = Mock(side_effect=new_parser)

        build_parser("exec", {}, factory)

        assert factory.call_args[0][0].data_format == "json"

    def test_other_inputs_default_to_influx(self):
        factory = Mock(side_effect=new_parser)

        build_parser("tail", {}, factory)

        assert factory.call_args[0][0].data_format == "influx"

    def test_recognized_keys_are_removed(self):
        factory = Mock(return_value=Mock())
        table = {
            "data_format": "graphite",
            "separator": "_",
            "templates": ["measurement*"],
            "tag_keys": ["host"],
            "data_type": "float",
            "commands": ["/bin/true"],
        }

        build_parser("exec", table, factory)

        assert table == {"commands": ["/bin/true"]}
        assert factory.call_args[0][0] == ParserConfig(
            data_format="graphite",
            separator="_",
            templates=["measurement*"],
            tag_keys=["host"],
            data_type="float",
            metric_name="exec",
        )

    def test_unknown_format_names_plugin(self):
        with pytest.raises(CodecError) as exc_info:
            build_parser("exec", {"data_format": "yaml"}, new_parser)

        assert "exec" in str(exc_info.value)
        assert "yaml" in str(exc_info.value)


@pytest.mark.unit
class TestBuildSerializer:
    """Test cases for the serializer builder."""

    def test_defaults_to_influx(self):
        factory = Mock(side_effect=new_serializer)

        build_serializer("file", {}, factory)

        assert factory.call_args[0][0] == SerializerConfig(data_format="influx")

    def test_recognized_keys_are_removed(self):
        table = {"data_format": "graphite", "prefix": "p", "template": "measurement", "files": ["stdout"]}
        factory = Mock(return_value=Mock())

        build_serializer("file", table, factory)

        assert table == {"files": ["stdout"]}
        assert factory.call_args[0][0] == SerializerConfig("graphite", "p", "measurement")

    def test_unknown_format_names_plugin(self):
        with pytest.raises(CodecError) as exc_info:
            build_serializer("file", {"data_format": "xml"}, new_serializer)

        assert exc_info.value.plugin == "file"
