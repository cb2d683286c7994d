"""
Input running external commands and parsing their output.

Each command's stdout is decoded with the parser selected by the instance's
``data_format`` (JSON unless configured otherwise).
"""

import logging
import shlex
import subprocess
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Optional

from ...parsers import ParseError, Parser
from ...validation import handle_subprocess_error
from ..base import Input, ParserInput

logger = logging.getLogger(__name__)


@dataclass
class Exec(Input, ParserInput):
    """Runs commands on every interval and parses their output."""

    commands: List[str] = field(default_factory=list)
    # Single command, accepted for old documents.
    command: str = ""
    timeout: timedelta = timedelta(seconds=5)
    parser: Optional[Parser] = field(default=None, init=False, repr=False)

    description = "Read metrics from one or more commands that can output to stdout"

    def set_parser(self, parser: Parser) -> None:
        self.parser = parser

    def gather(self, acc) -> None:
        if self.parser is None:
            acc.add_error(RuntimeError("exec: no parser configured"))
            return

        commands = list(self.commands)
        if self.command:
            commands.append(self.command)

        for command in commands:
            try:
                output = self.run(command)
                metrics = self.parser.parse(output)
            except (OSError, subprocess.SubprocessError, ParseError) as e:
                acc.add_error(RuntimeError(f"exec: {e} for command '{command}'"))
                continue
            for metric in metrics:
                acc.add_metric(metric)

    def run(self, command: str) -> bytes:
        """
        Run a command and return its stdout.

        Raises:
            subprocess.SubprocessError: If the command times out or exits non-zero
            OSError: If the command cannot be started
        """
        logger.debug(f"Executing command: '{command}'")
        try:
            process = subprocess.run(
                shlex.split(command),
                capture_output=True,
                timeout=self.timeout.total_seconds(),
                check=True,
            )
        except subprocess.CalledProcessError as e:
            handle_subprocess_error(e, command, severity="debug", reraise=False, logger=logger)
            raise
        return process.stdout
