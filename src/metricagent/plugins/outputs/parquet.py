"""
Output persisting metrics as Parquet files using Polars.

Every batch becomes one file in ``directory``. Metrics are stored in long
form, one row per field: time (ns), measurement, tags (sorted ``k=v`` pairs
joined by commas), field and value. Only numeric and boolean fields are
stored.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

import polars as pl

from ...validation import validate_enum_choice
from ..base import Output

logger = logging.getLogger(__name__)

COMPRESSIONS = ["snappy", "gzip", "brotli", "lz4", "zstd", "uncompressed"]

SCHEMA = {
    "time": pl.Int64,
    "measurement": pl.Utf8,
    "tags": pl.Utf8,
    "field": pl.Utf8,
    "value": pl.Float64,
}


@dataclass
class Parquet(Output):
    """Writes metric batches to compressed Parquet files."""

    directory: str = "metrics"
    compression: str = "snappy"

    description = "Write metrics to Parquet files"

    def __post_init__(self):
        self._sequence = 0

    def connect(self) -> None:
        self.compression = validate_enum_choice(
            self.compression, COMPRESSIONS, field_name="compression"
        )
        Path(self.directory).mkdir(parents=True, exist_ok=True)

    def write(self, metrics) -> None:
        rows: Dict[str, List] = {column: [] for column in SCHEMA}
        for metric in metrics:
            tags = ",".join(f"{k}={v}" for k, v in sorted(metric.tags.items()))
            for name, value in metric.fields.items():
                if isinstance(value, str):
                    continue
                rows["time"].append(metric.timestamp_ns())
                rows["measurement"].append(metric.name)
                rows["tags"].append(tags)
                rows["field"].append(name)
                rows["value"].append(float(value))

        if not rows["time"]:
            return

        df = pl.DataFrame(rows, schema=SCHEMA)
        path = Path(self.directory) / f"metrics-{rows['time'][0]}-{self._sequence:06d}.parquet"
        self._sequence += 1
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            df.write_parquet(path, compression=self.compression)
            logger.debug(f"Saved {len(df)} rows to {path}")
        except Exception as e:
            logger.error(f"Failed to save metrics to {path}: {e}")
            raise
