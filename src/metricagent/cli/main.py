"""
Command-line interface for the metric agent.

Loads the configuration (a file, a directory of ``*.conf`` files, or both)
and either reports what was loaded or, with ``--test``, gathers every input
once and prints the metrics in line protocol.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .. import __version__
from ..config import Config
from ..models import Accumulator
from ..serializers import InfluxSerializer
from ..validation import ConfigError, handle_cli_error
from .log_setup import setup_logging

logger = logging.getLogger(__name__)


def _split_filter(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [name for name in value.split(":") if name]


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="metricagent",
        description="Plugin-driven agent for collecting and reporting metrics.",
    )
    parser.add_argument("--config", type=str, help="Configuration file to load.")
    parser.add_argument(
        "--config-directory",
        type=str,
        help="Directory containing additional *.conf files.",
    )
    parser.add_argument(
        "--input-filter",
        type=str,
        help="Only load these inputs, separated by ':' (e.g. 'cpu:mem').",
    )
    parser.add_argument(
        "--output-filter",
        type=str,
        help="Only load these outputs, separated by ':' (e.g. 'file:parquet').",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument("--quiet", action="store_true", help="Only log errors.")
    parser.add_argument(
        "--test",
        action="store_true",
        help="Gather metrics once, print them to stdout and exit.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load(args: argparse.Namespace) -> Config:
    """
    Build a Config from parsed arguments.

    Raises:
        ConfigError: If any configuration file is invalid
    """
    config = Config(
        input_filters=_split_filter(args.input_filter),
        output_filters=_split_filter(args.output_filter),
    )
    config.load_config(args.config)
    if args.config_directory:
        config.load_directory(args.config_directory)
    if not config.inputs:
        raise ConfigError("no inputs found, did you provide a valid config file?")
    if not config.outputs and not args.test:
        raise ConfigError("no outputs found, did you provide a valid config file?")
    config.set_host_tag()
    return config


def run_test(config: Config) -> int:
    """Gather every input once and print the metrics; returns the error count."""
    serializer = InfluxSerializer()
    errors = 0
    for running in config.inputs:
        acc = Accumulator(running, config.agent.precision)
        running.input.gather(acc)
        errors += len(acc.errors)
        for metric in acc.metrics:
            for line in serializer.serialize(metric):
                print(line)
    return errors


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line entry point.

    Raises:
        SystemExit: With status 1 on configuration errors
    """
    args = build_arg_parser().parse_args(argv)
    setup_logging(debug=args.debug, quiet=args.quiet)

    try:
        config = load(args)
    except ConfigError as e:
        handle_cli_error(error=e, context="configuration loading", exit_code=1, logger=logger)
        return

    # The agent table may ask for different logging than the command line.
    agent = config.agent
    if agent.debug or agent.quiet or agent.logfile:
        setup_logging(
            debug=args.debug or agent.debug,
            quiet=args.quiet or agent.quiet,
            logfile=agent.logfile or None,
        )

    if args.test:
        errors = run_test(config)
        sys.exit(1 if errors else 0)

    logger.info(f"Loaded inputs: {' '.join(config.input_names())}")
    logger.info(f"Loaded outputs: {' '.join(config.output_names())}")
    if config.processors:
        logger.info(f"Loaded processors: {' '.join(p.name for p in config.processors)}")
    if config.aggregators:
        logger.info(f"Loaded aggregators: {' '.join(a.name for a in config.aggregators)}")
    logger.info(f"Tags enabled: {config.list_tags()}")
