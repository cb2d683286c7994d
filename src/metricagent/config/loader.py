"""
Configuration file loading utilities.

This module handles reading configuration files from disk: locating the
default file, trimming a byte-order mark, substituting ``$NAME`` environment
variables and parsing the TOML text into a plain document.
"""

import logging
import os
import re
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..validation import ConfigError, ConfigFormatError, ErrorSeverity, handle_config_error

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "METRICAGENT_CONFIG_PATH"
HOME_CONFIG_FILE = Path("~/.metricagent/metricagent.conf")
ETC_CONFIG_FILE = Path("/etc/metricagent/metricagent.conf")

_BOM = "\ufeff"
_ENV_VAR_RE = re.compile(r"\$\w+")


def substitute_env_vars(text: str) -> str:
    """
    Replace ``$NAME`` with the value of the environment variable NAME.

    Variables that are unset or empty are left as written.
    """
    def replace(match: "re.Match") -> str:
        value = os.environ.get(match.group(0)[1:], "")
        return value if value else match.group(0)

    return _ENV_VAR_RE.sub(replace, text)


def parse_text(text: str) -> Dict[str, Any]:
    """
    Parse configuration text into a document.

    Raises:
        tomllib.TOMLDecodeError: If the text is not valid TOML
    """
    if text.startswith(_BOM):
        text = text[len(_BOM):]
    return tomllib.loads(substitute_env_vars(text))


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Load and parse a configuration file with error handling.

    Args:
        file_path: Path to the file to load
        description: Human-readable description for error messages

    Returns:
        Parsed document

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the file is malformed
    """
    logger.info(f"Loading {description} from: {file_path}")

    if not file_path.exists():
        logger.error(f"{description} not found: {file_path}")
        raise FileNotFoundError(f"{description} not found: {file_path}")

    try:
        return parse_text(file_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {description}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise


def parse_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a configuration file, reporting failures as ConfigFormatError.

    Raises:
        ConfigFormatError: If the file cannot be read or parsed
    """
    try:
        return load_toml_file(Path(path))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        raise ConfigFormatError(str(e), path=str(path)) from e


def get_default_config_path() -> Path:
    """
    Find the configuration file to use when none is given.

    Locations are tried in order: ``$METRICAGENT_CONFIG_PATH``,
    ``~/.metricagent/metricagent.conf``, ``/etc/metricagent/metricagent.conf``.

    Raises:
        ConfigError: If none of the locations holds a file
    """
    env_file: Optional[str] = os.environ.get(CONFIG_PATH_ENV)
    home_file = HOME_CONFIG_FILE.expanduser()
    candidates = [Path(env_file)] if env_file else []
    candidates.extend([home_file, ETC_CONFIG_FILE])

    for candidate in candidates:
        if candidate.is_file():
            logger.info(f"Using config file: {candidate}")
            return candidate

    raise ConfigError(
        f"No config file specified, and could not find one in "
        f"${CONFIG_PATH_ENV}, {home_file}, or {ETC_CONFIG_FILE}"
    )
