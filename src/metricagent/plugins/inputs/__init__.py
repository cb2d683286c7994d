"""
Built-in input plugins.
"""

from .cpu import CPUStats
from .diskio import DiskIO
from .exec import Exec
from .mem import MemStats

__all__ = ["CPUStats", "DiskIO", "Exec", "MemStats", "register"]


def register(registry) -> None:
    """Add every built-in input to a registry."""
    registry.register("cpu", CPUStats)
    registry.register("mem", MemStats)
    registry.register("diskio", DiskIO)
    registry.register("exec", Exec)
