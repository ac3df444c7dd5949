"""
Centralized error handling utilities.

This module converts low-level errors into the bridge's own exception types
and formats them for display:

1. **Custom Exceptions** - Typed, user-friendly error classes (see base, server, config modules)
2. **Error Context** - Preserve technical details for logging, show friendly messages to users
3. **Recovery Hints** - Tell users what to do when things fail

## Quick Reference

| Scenario | Use This | Example |
|----------|----------|---------|
| bind()/listen() failed | `wrap_bind_error` | `raise wrap_bind_error(e, host, port) from e` |
| Config file invalid | `wrap_pydantic_error` | `raise wrap_pydantic_error(e, str(path)) from e` |
| Show an error in the CLI | `format_error_for_display` | `msg, hint = format_error_for_display(e)` |
| Critical section with auto-logging | `ErrorContext` | `with ErrorContext("start server"): ...` |
"""

import errno
import logging
import socket
from typing import Optional

from .base import TourBridgeError
from .config import ConfigFileInvalidError, ConfigValidationError
from .server import AddressInUseError, BindError, BindPermissionError, InvalidBindAddressError


logger = logging.getLogger(__name__)

_ADDRESS_IN_USE = {errno.EADDRINUSE}
_PERMISSION_DENIED = {errno.EACCES, errno.EPERM}
_INVALID_ADDRESS = {errno.EADDRNOTAVAIL, errno.EINVAL}


class ErrorContext:
    """
    Log the start, success or failure of an operation. Exceptions propagate.

    Example:
        ```python
        with ErrorContext("start server on 127.0.0.1:50500"):
            server_id = registry.create(...)
        ```
    """

    def __init__(
        self,
        operation: str,
        logger_instance: Optional[logging.Logger] = None
    ):
        """
        Initialize error context.

        Args:
            operation: Description of the operation
            logger_instance: Logger to use (defaults to module logger)
        """
        self.operation = operation
        self.logger = logger_instance or logger
        self.error: Optional[Exception] = None

    def __enter__(self):
        """Enter the context."""
        self.logger.debug(f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Log the outcome; never suppresses the exception."""
        if exc_type is None:
            self.logger.debug(f"Completed: {self.operation}")
            return False

        self.error = exc_val

        if isinstance(exc_val, TourBridgeError):
            self.logger.error(
                f"Failed to {self.operation}: {exc_val.technical_message}"
            )
        else:
            self.logger.error(
                f"Failed to {self.operation}: {exc_val}",
                exc_info=True
            )

        return False


def wrap_bind_error(error: Exception, host: str, port: int) -> BindError:
    """
    Convert a socket-level bind/listen failure into a BindError.

    Args:
        error: The original exception (usually OSError or socket.gaierror)
        host: Address the server tried to bind to
        port: Port the server tried to bind to

    Returns:
        The most specific BindError subclass for the failure
    """
    error_msg = str(error)
    code = getattr(error, "errno", None)

    # getaddrinfo failures carry resolver codes, not errno values
    if isinstance(error, socket.gaierror):
        return InvalidBindAddressError(host, port, error_msg)
    if code in _ADDRESS_IN_USE:
        return AddressInUseError(host, port, error_msg)
    if code in _PERMISSION_DENIED or isinstance(error, PermissionError):
        return BindPermissionError(host, port, error_msg)
    if code in _INVALID_ADDRESS or isinstance(error, (ValueError, TypeError)):
        return InvalidBindAddressError(host, port, error_msg)

    return BindError(host, port, error_msg)


def wrap_pydantic_error(error: Exception, file_path: str) -> TourBridgeError:
    """
    Convert Pydantic validation errors to tourbridge exceptions.

    Args:
        error: The Pydantic ValidationError
        file_path: Path to the config file that failed validation

    Returns:
        A ConfigurationError with appropriate type and message
    """
    from pydantic import ValidationError

    error_msg = str(error)

    # Format: "Invalid JSON: <actual error> [type=json_invalid, ..."
    if "Invalid JSON" in error_msg or "json_invalid" in error_msg:
        if "Invalid JSON:" in error_msg:
            parse_error = error_msg.split("Invalid JSON:")[1].split("[type=")[0].strip()
        else:
            parse_error = error_msg

        return ConfigFileInvalidError(file_path, parse_error)

    if isinstance(error, ValidationError):
        errors = error.errors()
        if errors:
            if len(errors) == 1:
                first_error = errors[0]
                field = ".".join(str(loc) for loc in first_error.get('loc', ('unknown',)))
                reason = first_error.get('msg', 'validation failed')
                value = first_error.get('input', None)

                return ConfigValidationError(
                    field=field,
                    value=value,
                    error_msg=reason,
                    file_path=file_path
                )

            error_lines = []
            for err in errors:
                field = ".".join(str(loc) for loc in err.get('loc', ('unknown',)))
                msg = err.get('msg', 'validation failed')
                error_lines.append(f"  - {field}: {msg}")

            combined_msg = f"{len(errors)} validation errors:\n" + "\n".join(error_lines)

            return ConfigValidationError(
                field="multiple fields",
                value=None,
                error_msg=combined_msg,
                file_path=file_path
            )

    return ConfigValidationError(
        field="unknown",
        value=None,
        error_msg=error_msg,
        file_path=file_path
    )


def format_error_for_display(error: Exception) -> tuple[str, Optional[str]]:
    """
    Format an exception for user display.

    Args:
        error: The exception to format

    Returns:
        Tuple of (user_message, recovery_hint or None)
    """
    if isinstance(error, TourBridgeError):
        return error.user_message, error.recovery_hint

    error_type = type(error).__name__
    return f"{error_type}: {error}", None
