"""
Builders translating one plugin table into typed configuration.

Every builder removes the keys it recognizes from the table it is given, so
that after the category builder (and, where applicable, the parser or
serializer builder) has run, the table holds only the plugin's own options.
Those are then assigned onto the plugin instance by ``unmarshal_table``.

Filter keys holding a value of the wrong shape are dropped without error.
"""

import logging
from typing import Callable, List

from ..models.config import AggregatorConfig, InputConfig, OutputConfig, ProcessorConfig
from ..models.filter import Filter, TagFilter
from ..parsers import Parser, ParserConfig
from ..serializers import Serializer, SerializerConfig
from ..validation import (
    CodecError,
    ConfigValueError,
    FilterCompileError,
    ValidationError,
    handle_config_error,
    parse_bool,
    parse_duration,
)
from .document import Table, get_string, get_string_list, get_table

logger = logging.getLogger(__name__)

FILTER_KEYS = [
    "namepass", "namedrop",
    "fieldpass", "fielddrop", "pass", "drop",
    "tagpass", "tagdrop",
    "tagexclude", "taginclude",
]
INPUT_KEYS = ["interval", "name_prefix", "name_suffix", "name_override", "tags"]
AGGREGATOR_KEYS = ["drop_original", "name_prefix", "name_suffix", "name_override", "tags"]
PARSER_KEYS = ["data_format", "separator", "templates", "tag_keys", "data_type"]
SERIALIZER_KEYS = ["data_format", "prefix", "template"]

# Accepted by the filter builder but not meaningful for these categories.
UNSUPPORTED_FIELDS = ["tagexclude", "taginclude"]

DEFAULT_DATA_FORMAT = "influx"
# Inputs that parsed JSON before data_format existed.
LEGACY_JSON_INPUTS = ["exec"]


def _pop_keys(table: Table, keys: List[str]) -> None:
    for key in keys:
        table.pop(key, None)


def _string_lists(table: Table, *keys: str) -> List[str]:
    patterns: List[str] = []
    for key in keys:
        values = get_string_list(table, key)
        if values is not None:
            patterns.extend(values)
    return patterns


def _tag_filters(table: Table, key: str) -> List[TagFilter]:
    section = get_table(table, key)
    if section is None:
        return []
    return [
        TagFilter(tag_name, [p for p in patterns if isinstance(p, str)])
        for tag_name, patterns in section.items()
        if isinstance(patterns, list)
    ]


def extract_filter(table: Table) -> Filter:
    """
    Remove the filter keys from a table and collect them, uncompiled.

    ``pass`` and ``drop`` are older spellings of ``fieldpass`` and
    ``fielddrop``; both spellings add to the same list.
    """
    metric_filter = Filter(
        name_pass=_string_lists(table, "namepass"),
        name_drop=_string_lists(table, "namedrop"),
        field_pass=_string_lists(table, "pass", "fieldpass"),
        field_drop=_string_lists(table, "drop", "fielddrop"),
        tag_pass=_tag_filters(table, "tagpass"),
        tag_drop=_tag_filters(table, "tagdrop"),
        tag_exclude=_string_lists(table, "tagexclude"),
        tag_include=_string_lists(table, "taginclude"),
    )
    _pop_keys(table, FILTER_KEYS)
    return metric_filter


def _compile_filter(category: str, name: str, metric_filter: Filter) -> Filter:
    try:
        return metric_filter.compile()
    except FilterCompileError as e:
        raise FilterCompileError(f"{category} {name}: {e.message}", plugin=name) from e


def build_filter(table: Table) -> Filter:
    """
    Build and compile the metric filter configured in a table.

    Args:
        table: Plugin table; the filter keys are removed from it

    Returns:
        Compiled Filter

    Raises:
        FilterCompileError: If a pattern has invalid glob syntax
    """
    return extract_filter(table).compile()


def _check_unsupported(category: str, name: str, table: Table) -> None:
    for key in UNSUPPORTED_FIELDS:
        if key in table:
            logger.debug(f"{category} {name}: '{key}' is accepted but has no effect")


def _pop_tags(category: str, name: str, table: Table) -> dict:
    section = get_table(table, "tags")
    table.pop("tags", None)
    if section is None:
        return {}
    tags = {k: v for k, v in section.items() if isinstance(v, str)}
    if len(tags) != len(section):
        handle_config_error(
            ValueError("tag values must be strings"),
            f"tags for {category} {name}",
            reraise=False,
            logger=logger,
        )
    return tags


def build_input(name: str, table: Table) -> InputConfig:
    """
    Build the configuration of one input instance.

    Recognized keys: interval, name_prefix, name_suffix, name_override, tags
    and the filter keys.

    Raises:
        ConfigValueError: If interval is not a valid duration
        FilterCompileError: If a filter pattern is invalid
    """
    config = InputConfig(name=name)

    interval = get_string(table, "interval")
    if interval is not None:
        try:
            config.interval = parse_duration(interval, field_name="interval")
        except ValidationError as e:
            raise ConfigValueError(f"input {name}: {e}", plugin=name) from e

    config.name_prefix = get_string(table, "name_prefix") or ""
    config.name_suffix = get_string(table, "name_suffix") or ""
    config.name_override = get_string(table, "name_override") or ""
    config.tags = _pop_tags("input", name, table)
    _pop_keys(table, INPUT_KEYS)

    _check_unsupported("input", name, table)
    config.filter = _compile_filter("input", name, extract_filter(table))
    return config


def build_output(name: str, table: Table) -> OutputConfig:
    """
    Build the configuration of one output instance.

    Outputs do not filter on field keys: fieldpass and fielddrop (and their
    older spellings) are applied to measurement names instead, replacing
    namepass and namedrop when given.
    """
    metric_filter = extract_filter(table)
    if metric_filter.field_drop:
        metric_filter.name_drop = metric_filter.field_drop
        metric_filter.field_drop = []
    if metric_filter.field_pass:
        metric_filter.name_pass = metric_filter.field_pass
        metric_filter.field_pass = []
    return OutputConfig(name=name, filter=_compile_filter("output", name, metric_filter))


def build_processor(name: str, table: Table) -> ProcessorConfig:
    """Build the configuration of one processor instance."""
    _check_unsupported("processor", name, table)
    return ProcessorConfig(name=name, filter=_compile_filter("processor", name, extract_filter(table)))


def build_aggregator(name: str, table: Table) -> AggregatorConfig:
    """
    Build the configuration of one aggregator instance.

    A drop_original value that is not a boolean is logged and ignored.
    """
    config = AggregatorConfig(name=name)
    _check_unsupported("aggregator", name, table)

    if "drop_original" in table:
        value = table["drop_original"]
        try:
            config.drop_original = parse_bool(value, field_name="drop_original")
        except ValidationError as e:
            handle_config_error(
                e, f"parsing boolean value for {name}", reraise=False, logger=logger
            )

    config.name_prefix = get_string(table, "name_prefix") or ""
    config.name_suffix = get_string(table, "name_suffix") or ""
    config.name_override = get_string(table, "name_override") or ""
    config.tags = _pop_tags("aggregator", name, table)
    _pop_keys(table, AGGREGATOR_KEYS)

    config.filter = _compile_filter("aggregator", name, extract_filter(table))
    return config


def build_parser(name: str, table: Table,
                 factory: Callable[[ParserConfig], Parser]) -> Parser:
    """
    Build the parser for an input that accepts one.

    Args:
        name: Input plugin name; also the metric name for formats without one
        table: Plugin table; the parser keys are removed from it
        factory: Creates a parser from a ParserConfig

    Raises:
        CodecError: If the data format is unknown or the parser cannot be built
    """
    data_format = get_string(table, "data_format") or ""
    if not data_format:
        data_format = "json" if name in LEGACY_JSON_INPUTS else DEFAULT_DATA_FORMAT

    config = ParserConfig(
        data_format=data_format,
        separator=get_string(table, "separator") or "",
        templates=get_string_list(table, "templates") or [],
        tag_keys=get_string_list(table, "tag_keys") or [],
        data_type=get_string(table, "data_type") or "",
        metric_name=name,
    )
    _pop_keys(table, PARSER_KEYS)

    try:
        return factory(config)
    except ValueError as e:
        raise CodecError(f"input {name}: {e}", plugin=name) from e


def build_serializer(name: str, table: Table,
                     factory: Callable[[SerializerConfig], Serializer]) -> Serializer:
    """
    Build the serializer for an output that accepts one.

    Raises:
        CodecError: If the data format is unknown or the serializer cannot be built
    """
    config = SerializerConfig(
        data_format=get_string(table, "data_format") or DEFAULT_DATA_FORMAT,
        prefix=get_string(table, "prefix") or "",
        template=get_string(table, "template") or "",
    )
    _pop_keys(table, SERIALIZER_KEYS)

    try:
        return factory(config)
    except ValueError as e:
        raise CodecError(f"output {name}: {e}", plugin=name) from e
