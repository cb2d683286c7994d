"""
Process-wide configuration access.

The first call to get_config() loads the configuration file with the default
plugin registries; later calls return the cached Config. The path can be set
beforehand (e.g. by tests or the CLI); otherwise the default locations are
searched.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..validation import ErrorSeverity, handle_config_error
from .assembler import Config

logger = logging.getLogger(__name__)

# --- Global Singleton for Configuration ---

_CONFIG: Optional[Config] = None

# None means: search the default locations.
_CONFIG_FILE_PATH: Optional[Path] = None


def set_config_path(config_path: Union[str, Path, None]) -> None:
    """
    Set the configuration file loaded by get_config().

    Clears any cached configuration so the next get_config() call loads the
    new file.
    """
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = Path(config_path) if config_path else None
    _CONFIG = None
    logger.info(f"Configuration path set to: {config_path}")


def clear_config_cache() -> None:
    """Forget the cached configuration, forcing a reload on next access."""
    global _CONFIG
    _CONFIG = None
    logger.debug("Configuration cache cleared")


def _load_config(config_path: Optional[Path]) -> Config:
    config = Config()
    try:
        config.load_config(config_path)
    except Exception as e:
        handle_config_error(
            error=e,
            context="loading configuration file",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
    logger.info(
        f"Successfully loaded configuration with {len(config.inputs)} inputs "
        f"and {len(config.outputs)} outputs"
    )
    return config


def get_config() -> Config:
    """
    Get the process-wide Config, loading it if necessary.

    Raises:
        ConfigError: If the configuration cannot be loaded
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _load_config(_CONFIG_FILE_PATH)
    return _CONFIG


def is_config_loaded() -> bool:
    return _CONFIG is not None


def get_config_info() -> dict:
    """
    Get information about the current configuration state.

    Returns:
        Dictionary with configuration metadata
    """
    return {
        "config_loaded": is_config_loaded(),
        "config_path": str(_CONFIG_FILE_PATH) if _CONFIG_FILE_PATH else None,
        "inputs_count": len(_CONFIG.inputs) if _CONFIG else 0,
        "outputs_count": len(_CONFIG.outputs) if _CONFIG else 0,
        "processors_count": len(_CONFIG.processors) if _CONFIG else 0,
        "aggregators_count": len(_CONFIG.aggregators) if _CONFIG else 0,
    }
