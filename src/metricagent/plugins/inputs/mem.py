"""
Memory usage input backed by psutil.
"""

from dataclasses import dataclass

import psutil

from ..base import Input


@dataclass
class MemStats(Input):
    """Reports virtual memory usage."""

    description = "Read metrics about memory usage"

    def gather(self, acc) -> None:
        vm = psutil.virtual_memory()
        fields = {
            "total": vm.total,
            "available": vm.available,
            "used": vm.used,
            "free": vm.free,
            "used_percent": 100 * float(vm.used) / float(vm.total) if vm.total else 0.0,
            "available_percent": 100 * float(vm.available) / float(vm.total) if vm.total else 0.0,
        }
        acc.add_fields("mem", fields)
