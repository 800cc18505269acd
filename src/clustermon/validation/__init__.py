"""
Validation and error handling for the clustermon package.

This module provides input validation, the exception taxonomy for metrics
streams, and consistent error reporting helpers.
"""

from .exceptions import (
    ErrorSeverity,
    MetricsRequestError,
    StreamDecodeError,
    StreamError,
    UnexpectedEndOfStreamError,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
    handle_stream_error,
)
from .validators import (
    validate_bool,
    validate_endpoint,
    validate_enum_choice,
    validate_positive_float,
    validate_positive_integer,
    validate_string_list,
)

__all__ = [
    # Errors
    "ErrorSeverity",
    "ValidationError",
    "StreamError",
    "StreamDecodeError",
    "UnexpectedEndOfStreamError",
    "MetricsRequestError",
    "handle_error",
    "handle_config_error",
    "handle_stream_error",
    "handle_cli_error",
    # Validators
    "validate_bool",
    "validate_endpoint",
    "validate_enum_choice",
    "validate_positive_float",
    "validate_positive_integer",
    "validate_string_list",
]
