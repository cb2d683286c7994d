"""
The Config aggregate and the loading of documents into it.

A Config owns the global tags, the agent settings and one ordered list of
running wrappers per plugin category. Documents are walked section by
section: ``tags``/``global_tags`` first, then ``agent``, then every plugin
section in document order. Each declared plugin occurrence is assembled into
a running wrapper and appended in declaration order.

Loading a document is all or nothing: if any hard error occurs, the Config
is restored to the state it had before the load started.
"""

import copy
import logging
import os
import socket
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..models.config import AgentConfig
from ..models.running import RunningAggregator, RunningInput, RunningOutput, RunningProcessor
from ..plugins.base import ParserInput, SerializerOutput
from ..plugins.registry import Registries, create_default_registries
from ..validation import ConfigError, ConfigFormatError, ConfigValueError, UnknownPluginError
from .builders import (
    build_aggregator,
    build_input,
    build_output,
    build_parser,
    build_processor,
    build_serializer,
)
from .document import Table, is_table, is_table_array
from .loader import get_default_config_path, parse_file
from .unmarshal import unmarshal_table

logger = logging.getLogger(__name__)

# Plugins renamed since older documents were written.
LEGACY_INPUT_NAMES = {"io": "diskio"}

TAG_SECTIONS = ("tags", "global_tags")
RESERVED_SECTIONS = ("agent",) + TAG_SECTIONS


class Config:
    """
    Loaded configuration: global tags, agent settings and plugin instances.

    Attributes:
        tags: Global tags added to every metric
        agent: Agent-wide settings
        inputs, outputs, processors, aggregators: Running wrappers in
            declaration order
        input_filters, output_filters: When non-empty, only plugins with
            these names are loaded
    """

    def __init__(self, registries: Optional[Registries] = None,
                 input_filters: Optional[List[str]] = None,
                 output_filters: Optional[List[str]] = None):
        self.registries = registries or create_default_registries()
        self.tags: Dict[str, str] = {}
        self.agent = AgentConfig()
        self.inputs: List[RunningInput] = []
        self.outputs: List[RunningOutput] = []
        self.processors: List[RunningProcessor] = []
        self.aggregators: List[RunningAggregator] = []
        self.input_filters: List[str] = list(input_filters or [])
        self.output_filters: List[str] = list(output_filters or [])

    # --- Introspection ---

    def input_names(self) -> List[str]:
        return [running.name for running in self.inputs]

    def output_names(self) -> List[str]:
        return [running.name for running in self.outputs]

    def list_tags(self) -> str:
        """Global tags as sorted ``key=value`` pairs joined by spaces."""
        return " ".join(sorted(f"{k}={v}" for k, v in self.tags.items()))

    def set_host_tag(self) -> None:
        """Add the ``host`` global tag unless the agent omits it."""
        if self.agent.omit_hostname:
            return
        if not self.agent.hostname:
            self.agent.hostname = socket.gethostname()
        self.tags["host"] = self.agent.hostname

    # --- Loading ---

    def load_config(self, path: Union[str, Path, None] = None) -> None:
        """
        Load a configuration file into this Config.

        Args:
            path: File to load; the default locations are searched when None

        Raises:
            ConfigError: If the file cannot be read or any section is invalid
        """
        if not path:
            path = get_default_config_path()
        table = parse_file(path)
        self.load_document(table, str(path))

    def load_directory(self, path: Union[str, Path]) -> None:
        """Load every ``*.conf`` file below a directory, in sorted order."""
        for root, dirs, files in os.walk(path):
            dirs.sort()
            for filename in sorted(files):
                if filename.endswith(".conf") and len(filename) > len(".conf"):
                    self.load_config(os.path.join(root, filename))

    def load_document(self, table: Table, path: str = "") -> None:
        """
        Apply a parsed document to this Config.

        The plugin tables inside the document are consumed: recognized keys
        are removed from them while the instances are built.

        Raises:
            ConfigError: On any error; the error carries ``path`` and the
                Config is left as it was before the call. Errors that are not
                ConfigErrors are wrapped, with the original as the cause
        """
        snapshot = self._snapshot()
        try:
            self._walk(table, path)
        except ConfigError as e:
            self._restore(snapshot)
            raise e.with_path(path)
        except Exception as e:
            self._restore(snapshot)
            raise ConfigError(str(e) or type(e).__name__, path=path or None) from e
        except BaseException:
            self._restore(snapshot)
            raise
        self._check_buffer_limits()
        logger.debug(f"Loaded {path or 'document'}: inputs={self.input_names()} outputs={self.output_names()}")

    def _snapshot(self) -> Dict[str, Any]:
        return {
            "tags": dict(self.tags),
            "agent": copy.copy(self.agent),
            "inputs": len(self.inputs),
            "outputs": len(self.outputs),
            "processors": len(self.processors),
            "aggregators": len(self.aggregators),
        }

    def _restore(self, snapshot: Dict[str, Any]) -> None:
        # Tags are shared by reference with the running wrappers.
        self.tags.clear()
        self.tags.update(snapshot["tags"])
        self.agent = snapshot["agent"]
        del self.inputs[snapshot["inputs"]:]
        del self.outputs[snapshot["outputs"]:]
        del self.processors[snapshot["processors"]:]
        del self.aggregators[snapshot["aggregators"]:]

    def _walk(self, table: Table, path: str) -> None:
        for section in TAG_SECTIONS:
            if section in table:
                self._load_tags(table[section])

        if "agent" in table:
            agent_table = table["agent"]
            if not is_table(agent_table):
                raise ConfigFormatError("invalid configuration")
            unmarshal_table(agent_table, self.agent, plugin="agent")

        for name, value in table.items():
            if not is_table(value):
                raise ConfigFormatError("invalid configuration")

            if name in RESERVED_SECTIONS:
                continue
            elif name == "outputs":
                self._load_category(value, self.add_output, allow_single=True)
            elif name in ("inputs", "plugins"):
                self._load_category(value, self.add_input, allow_single=True)
            elif name == "processors":
                self._load_category(value, self.add_processor, allow_single=False)
            elif name == "aggregators":
                self._load_category(value, self.add_aggregator, allow_single=False)
            else:
                # Older documents declare inputs as top level tables.
                self.add_input(name, value)

    def _load_tags(self, value: Any) -> None:
        if not is_table(value):
            raise ConfigFormatError("invalid configuration")
        for key, tag_value in value.items():
            if not isinstance(tag_value, str):
                raise ConfigValueError(f"global tag '{key}' must be a string, got {tag_value!r}")
            self.tags[key] = tag_value

    @staticmethod
    def _load_category(section: Table, add, allow_single: bool) -> None:
        for plugin_name, plugin_value in section.items():
            if allow_single and is_table(plugin_value):
                add(plugin_name, plugin_value)
            elif is_table_array(plugin_value):
                for plugin_table in plugin_value:
                    add(plugin_name, plugin_table)
            else:
                raise ConfigFormatError(
                    f"Unsupported config format: {plugin_name}", plugin=plugin_name
                )

    def _check_buffer_limits(self) -> None:
        batch = self.agent.metric_batch_size
        limit = self.agent.metric_buffer_limit
        if batch > 0 and limit > 0 and (limit < 2 * batch or limit % batch != 0):
            logger.warning(
                f"metric_buffer_limit ({limit}) should be a multiple of, and at "
                f"least twice, metric_batch_size ({batch})"
            )

    # --- Assembly ---

    def add_input(self, name: str, table: Table) -> None:
        """
        Instantiate one input from its table and append its wrapper.

        Raises:
            UnknownPluginError: If no input is registered under the name
            ConfigError: If the table is invalid
        """
        if self.input_filters and name not in self.input_filters:
            return
        name = LEGACY_INPUT_NAMES.get(name, name)

        if name not in self.registries.inputs:
            raise UnknownPluginError(f"Undefined but requested input: {name}", plugin=name)
        plugin = self.registries.inputs.create(name)

        if isinstance(plugin, ParserInput):
            plugin.set_parser(build_parser(name, table, self.registries.parser_factory))

        plugin_config = build_input(name, table)
        unmarshal_table(table, plugin, plugin=name)

        self.inputs.append(RunningInput(plugin, plugin_config, self.tags))
        logger.debug(f"Added input '{name}'")

    def add_output(self, name: str, table: Table) -> None:
        """
        Instantiate one output from its table and append its wrapper.

        Batch size, buffer limit and flush behavior are copied from the
        agent settings as they are at this point.
        """
        if self.output_filters and name not in self.output_filters:
            return

        if name not in self.registries.outputs:
            raise UnknownPluginError(f"Undefined but requested output: {name}", plugin=name)
        plugin = self.registries.outputs.create(name)

        if isinstance(plugin, SerializerOutput):
            plugin.set_serializer(build_serializer(name, table, self.registries.serializer_factory))

        output_config = build_output(name, table)
        unmarshal_table(table, plugin, plugin=name)

        self.outputs.append(RunningOutput(
            name,
            plugin,
            output_config,
            metric_batch_size=self.agent.metric_batch_size,
            metric_buffer_limit=self.agent.metric_buffer_limit,
            flush_buffer_when_full=self.agent.flush_buffer_when_full,
        ))
        logger.debug(f"Added output '{name}'")

    def add_processor(self, name: str, table: Table) -> None:
        """Instantiate one processor from its table and append its wrapper."""
        if name not in self.registries.processors:
            raise UnknownPluginError(f"Undefined but requested processor: {name}", plugin=name)
        plugin = self.registries.processors.create(name)

        processor_config = build_processor(name, table)
        unmarshal_table(table, plugin, plugin=name)

        self.processors.append(RunningProcessor(name, plugin, processor_config))
        logger.debug(f"Added processor '{name}'")

    def add_aggregator(self, name: str, table: Table) -> None:
        """Instantiate one aggregator from its table and append its wrapper."""
        if name not in self.registries.aggregators:
            raise UnknownPluginError(f"Undefined but requested aggregator: {name}", plugin=name)
        plugin = self.registries.aggregators.create(name)

        aggregator_config = build_aggregator(name, table)
        unmarshal_table(table, plugin, plugin=name)

        self.aggregators.append(RunningAggregator(plugin, aggregator_config, self.tags))
        logger.debug(f"Added aggregator '{name}'")
