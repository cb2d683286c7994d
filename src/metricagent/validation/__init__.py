"""
Validation and error handling for the metricagent package.

This module provides the configuration error hierarchy, value validators and
the logging helpers used to report errors consistently across the package.
"""

# Core exception classes and error handling
from .exceptions import (
    CodecError,
    ConfigError,
    ConfigFormatError,
    ConfigValueError,
    ErrorSeverity,
    FilterCompileError,
    UnknownPluginError,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
    handle_subprocess_error,
)

# Validation functions
from .validators import (
    coerce_duration,
    parse_bool,
    parse_duration,
    validate_enum_choice,
)

__all__ = [
    # Exceptions
    "ErrorSeverity",
    "ValidationError",
    "ConfigError",
    "ConfigFormatError",
    "UnknownPluginError",
    "ConfigValueError",
    "CodecError",
    "FilterCompileError",
    # Handlers
    "handle_error",
    "handle_config_error",
    "handle_subprocess_error",
    "handle_cli_error",
    # Validators
    "parse_duration",
    "coerce_duration",
    "parse_bool",
    "validate_enum_choice",
]
