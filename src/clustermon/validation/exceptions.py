"""
Exception types and error handling helpers.

This module provides the exception taxonomy used across clustermon and a
small set of helpers for logging errors consistently before they are
re-raised or folded into a result.

Error classes:
- ValidationError: bad configuration or caller input
- StreamError and subclasses: a metrics stream that could not be consumed
- MetricsRequestError: the server refused the metrics request

Cancellation is not modelled here: a cancelled stream surfaces as
asyncio.CancelledError (caller abort) or TimeoutError (deadline).
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
    Exception raised when validation fails.
    
    This is the main exception type used for configuration and option checks.
    """
    
    def __init__(self, message: str, field_name: Optional[str] = None, 
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


class StreamError(Exception):
    """Base class for failures while consuming a metrics stream."""


class UnexpectedEndOfStreamError(StreamError):
    """The stream ended before a frame marked final was received."""

    def __init__(self, message: str = "metrics stream ended unexpectedly",
                 frames_delivered: int = 0):
        super().__init__(message)
        self.frames_delivered = frames_delivered


class StreamDecodeError(StreamError):
    """A frame could not be decoded into a RealtimeMetrics envelope."""

    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message)
        self.offset = offset


class MetricsRequestError(Exception):
    """
    The metrics endpoint answered with a non-200 status.

    Attributes:
        status: HTTP status code
        code: Server error code (e.g. "AccessDenied"), empty if unknown
        message: Server supplied message or the raw body
    """

    def __init__(self, status: int, code: str = "", message: str = ""):
        self.status = status
        self.code = code
        self.message = message or f"HTTP {status}"
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.code:
            return f"{self.code}: {self.message} (status {self.status})"
        return f"{self.message} (status {self.status})"


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
    
    # Handle both enum and string severity values
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


def handle_stream_error(error: Exception, source: str, **kwargs) -> None:
    """Handle errors raised while consuming a metrics stream."""
    handle_error(error, f"metrics stream '{source}'", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """Handle CLI-related errors."""
    exit_code = kwargs.pop('exit_code', 1)
    include_traceback = kwargs.pop('include_traceback', False)

    severity = kwargs.pop('severity', ErrorSeverity.ERROR)
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)
    if include_traceback:
        (kwargs.get('logger') or logger).debug("Traceback:", exc_info=error)

    sys.exit(exit_code)
