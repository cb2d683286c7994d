"""
Output writing serialized metrics to files or stdout.
"""

import logging
import sys
from dataclasses import dataclass, field
from typing import IO, List, Optional

from ...serializers import SerializeError, Serializer
from ..base import Output, SerializerOutput

logger = logging.getLogger(__name__)


@dataclass
class File(Output, SerializerOutput):
    """Writes every metric to each configured file; "stdout" is standard output."""

    files: List[str] = field(default_factory=lambda: ["stdout"])
    serializer: Optional[Serializer] = field(default=None, init=False, repr=False)
    _writers: List[IO[str]] = field(default_factory=list, init=False, repr=False)

    description = "Send metrics to file(s)"

    def set_serializer(self, serializer: Serializer) -> None:
        self.serializer = serializer

    def connect(self) -> None:
        writers: List[IO[str]] = []
        try:
            for path in self.files or ["stdout"]:
                if path == "stdout":
                    writers.append(sys.stdout)
                else:
                    writers.append(open(path, "a", encoding="utf-8"))
        except OSError as e:
            logger.error(f"Failed to open output file: {e}")
            for writer in writers:
                if writer is not sys.stdout:
                    writer.close()
            raise
        self._writers = writers
        logger.debug(f"File output writing to {self.files}")

    def close(self) -> None:
        for writer in self._writers:
            if writer is not sys.stdout:
                writer.close()
        self._writers = []

    def write(self, metrics) -> None:
        if self.serializer is None:
            raise RuntimeError("file output has no serializer configured")
        if not self._writers:
            self.connect()

        for metric in metrics:
            try:
                lines = self.serializer.serialize(metric)
            except SerializeError as e:
                logger.error(f"Failed to serialize metric {metric.name}: {e}")
                continue
            for writer in self._writers:
                for line in lines:
                    writer.write(line + "\n")
        for writer in self._writers:
            writer.flush()
