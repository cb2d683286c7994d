"""
Plugin registries.

Each plugin category has its own PluginRegistry mapping a plugin name to a
creator that returns a fresh, unconfigured instance. The Registries bundle
groups the four category registries with the parser and serializer factories
and is handed explicitly to the configuration loader; nothing here is a
module-level singleton.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..parsers import ParserConfig, Parser, new_parser
from ..serializers import Serializer, SerializerConfig, new_serializer

logger = logging.getLogger(__name__)

Creator = Callable[[], Any]


class PluginRegistry:
    """Name to creator lookup for one plugin category."""

    def __init__(self, category: str):
        self.category = category
        self._creators: Dict[str, Creator] = {}

    def register(self, name: str, creator: Creator) -> None:
        """
        Register a plugin creator.

        Raises:
            ValueError: If the name is already registered
        """
        if name in self._creators:
            raise ValueError(f"{self.category} plugin '{name}' is already registered")
        self._creators[name] = creator
        logger.debug(f"Registered {self.category} plugin '{name}'")

    def get(self, name: str) -> Optional[Creator]:
        return self._creators.get(name)

    def create(self, name: str) -> Any:
        """
        Instantiate a registered plugin.

        Raises:
            KeyError: If the name is not registered
        """
        creator = self._creators.get(name)
        if creator is None:
            raise KeyError(name)
        return creator()

    def names(self) -> List[str]:
        return sorted(self._creators)

    def __contains__(self, name: str) -> bool:
        return name in self._creators

    def __len__(self) -> int:
        return len(self._creators)


@dataclass
class Registries:
    """Everything the configuration loader needs to instantiate plugins."""

    inputs: PluginRegistry = field(default_factory=lambda: PluginRegistry("input"))
    outputs: PluginRegistry = field(default_factory=lambda: PluginRegistry("output"))
    processors: PluginRegistry = field(default_factory=lambda: PluginRegistry("processor"))
    aggregators: PluginRegistry = field(default_factory=lambda: PluginRegistry("aggregator"))
    parser_factory: Callable[[ParserConfig], Parser] = new_parser
    serializer_factory: Callable[[SerializerConfig], Serializer] = new_serializer


def create_default_registries() -> Registries:
    """Create a Registries bundle holding every built-in plugin."""
    from .aggregators import register as register_aggregators
    from .inputs import register as register_inputs
    from .outputs import register as register_outputs
    from .processors import register as register_processors

    registries = Registries()
    register_inputs(registries.inputs)
    register_outputs(registries.outputs)
    register_processors(registries.processors)
    register_aggregators(registries.aggregators)
    return registries
