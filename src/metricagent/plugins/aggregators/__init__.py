"""
Built-in aggregator plugins.
"""

from .minmax import MinMax

__all__ = ["MinMax", "register"]


def register(registry) -> None:
    """Add every built-in aggregator to a registry."""
    registry.register("minmax", MinMax)
