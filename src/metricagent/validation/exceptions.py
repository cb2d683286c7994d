"""
Exception types and error handling helpers.

This module defines the configuration error hierarchy raised while a document
is being loaded, together with the small set of helpers used to log errors
consistently and optionally re-raise them.
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ValidationError(Exception):
    """
    Exception raised when a single value fails validation.

    Validators raise this with the offending field name so callers can wrap
    it into a ConfigError that names the plugin and file.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


class ConfigError(Exception):
    """
    Base class for every hard error raised while loading a configuration.

    Attributes:
        path: Configuration file being loaded, when known
        plugin: Plugin name the error relates to, when known
    """

    def __init__(self, message: str, path: Optional[str] = None,
                 plugin: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path
        self.plugin = plugin

    def __str__(self) -> str:
        if self.path:
            return f"Error parsing {self.path}, {self.message}"
        return self.message

    def with_path(self, path: Optional[str]) -> "ConfigError":
        """Attach the source path unless one is already recorded."""
        if path and not self.path:
            self.path = path
        return self


class ConfigFormatError(ConfigError):
    """A document section has an unexpected node kind."""


class UnknownPluginError(ConfigError):
    """A declared plugin is not present in its category registry."""


class ConfigValueError(ConfigError):
    """A recognized key holds a value that cannot be used."""


class CodecError(ConfigError):
    """A parser or serializer could not be selected or constructed."""


class FilterCompileError(ConfigError):
    """A metric filter contains an invalid glob pattern."""


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Handle errors with consistent logging and optional re-raising.

    Args:
        error: The exception that occurred
        context: Context description of where the error occurred
        severity: Severity level for logging
        reraise: Whether to re-raise the exception after logging
        logger: Logger instance to use (defaults to module logger)
    """
    effective_logger = logger or globals()['logger']

    error_msg = f"Error in {context}: {error}"

    if isinstance(severity, str):
        severity_str = severity.lower()
    else:
        severity_str = severity.value

    if severity_str == "debug":
        effective_logger.debug(error_msg, exc_info=True)
    elif severity_str == "info":
        effective_logger.info(error_msg)
    elif severity_str == "warning":
        effective_logger.warning(error_msg)
    elif severity_str == "error":
        effective_logger.error(error_msg)
    elif severity_str == "critical":
        effective_logger.critical(error_msg, exc_info=True)

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_subprocess_error(error: Exception, command: str, **kwargs) -> None:
    """Handle subprocess-related errors."""
    handle_error(error, f"subprocess command '{command}'", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """Log a CLI error and exit the process."""
    exit_code = kwargs.pop('exit_code', 1)

    severity = kwargs.pop('severity', ErrorSeverity.ERROR)
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)

    sys.exit(exit_code)
