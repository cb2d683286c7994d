"""
CPU usage input backed by psutil.
"""

import logging
from dataclasses import dataclass

import psutil

from ..base import Input

logger = logging.getLogger(__name__)


@dataclass
class CPUStats(Input):
    """Reports CPU usage percentages per core and in total."""

    percpu: bool = True
    totalcpu: bool = True
    collect_cpu_time: bool = False

    description = "Read metrics about cpu usage"

    def gather(self, acc) -> None:
        if self.percpu:
            per_core = psutil.cpu_times_percent(interval=None, percpu=True)
            times = psutil.cpu_times(percpu=True) if self.collect_cpu_time else []
            for index, usage in enumerate(per_core):
                cpu_time = times[index] if index < len(times) else None
                self._add(acc, f"cpu{index}", usage, cpu_time)

        if self.totalcpu:
            usage = psutil.cpu_times_percent(interval=None, percpu=False)
            cpu_time = psutil.cpu_times(percpu=False) if self.collect_cpu_time else None
            self._add(acc, "cpu-total", usage, cpu_time)

    def _add(self, acc, cpu: str, usage, cpu_time) -> None:
        fields = {f"usage_{k}": float(v) for k, v in usage._asdict().items()}
        if cpu_time is not None:
            fields.update({f"time_{k}": float(v) for k, v in cpu_time._asdict().items()})
        acc.add_fields("cpu", fields, {"cpu": cpu})
