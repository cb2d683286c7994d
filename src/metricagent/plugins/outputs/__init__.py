"""
Built-in output plugins.
"""

from .file import File
from .parquet import Parquet

__all__ = ["File", "Parquet", "register"]


def register(registry) -> None:
    """Add every built-in output to a registry."""
    registry.register("file", File)
    registry.register("parquet", Parquet)
