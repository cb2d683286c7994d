"""
Disk I/O input backed by psutil.
"""

import logging
from dataclasses import dataclass, field
from typing import List

import psutil

from ..base import Input

logger = logging.getLogger(__name__)

_COUNTERS = ("read_count", "write_count", "read_bytes", "write_bytes", "read_time", "write_time")


@dataclass
class DiskIO(Input):
    """Reports per-device I/O counters, optionally for selected devices only."""

    devices: List[str] = field(default_factory=list)
    skip_serial_number: bool = True

    description = "Read metrics about disk IO by device"

    def gather(self, acc) -> None:
        counters = psutil.disk_io_counters(perdisk=True)
        if not counters:
            logger.debug("No disk I/O counters available")
            return

        for device, stats in counters.items():
            if self.devices and device not in self.devices:
                continue
            fields = {name: getattr(stats, name) for name in _COUNTERS if hasattr(stats, name)}
            acc.add_fields("diskio", fields, {"name": device})
