"""
Built-in processor plugins.
"""

from .printer import Printer

__all__ = ["Printer", "register"]


def register(registry) -> None:
    """Add every built-in processor to a registry."""
    registry.register("printer", Printer)
