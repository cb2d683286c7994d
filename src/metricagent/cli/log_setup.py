"""
Logging configuration for the agent process.
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(debug: bool = False, quiet: bool = False, logfile: Optional[str] = None) -> None:
    """
    Configure the root logger.

    Args:
        debug: Log at DEBUG level
        quiet: Only log errors; ignored when debug is set
        logfile: Write to this file instead of stdout
    """
    if debug:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.INFO

    handler_kwargs = {"filename": logfile} if logfile else {"stream": sys.stdout}
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        force=True,
        **handler_kwargs,
    )
