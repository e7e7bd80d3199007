"""
Error taxonomy for askr.

This module defines the exception hierarchy used across the prompt core and the
terminal front end. Every error carries a stable error code, a user-facing message
and the process exit code a caller should terminate with.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    """Process exit codes reported to the calling script."""

    SUCCESS = 0
    VALIDATION_FAILED = 1
    INVALID_ARGUMENTS = 2
    MAX_ATTEMPTS_EXCEEDED = 3
    TIMEOUT = 124
    INTERRUPTED = 130


class ErrorType(Enum):
    """Error type categories for consistent error handling."""

    ARGUMENT = "argument"
    VALIDATION = "validation"
    TERMINAL = "terminal"
    IO = "io"
    SESSION = "session"
    SYSTEM = "system"


class ErrorCode(Enum):
    """Specific error codes for common scenarios."""

    # Argument and configuration errors
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    INVALID_PATTERN = "INVALID_PATTERN"
    INVALID_RANGE = "INVALID_RANGE"
    UNKNOWN_VALIDATOR = "UNKNOWN_VALIDATOR"
    CONFIG_INVALID = "CONFIG_INVALID"

    # Validation errors
    VALIDATION_FAILED = "VALIDATION_FAILED"

    # Terminal errors
    TERMINAL_UNAVAILABLE = "TERMINAL_UNAVAILABLE"
    RAW_MODE_FAILED = "RAW_MODE_FAILED"

    # Input stream errors
    READ_FAILED = "READ_FAILED"
    WRITE_FAILED = "WRITE_FAILED"

    # Session outcomes
    TIMEOUT = "TIMEOUT"
    INTERRUPTED = "INTERRUPTED"
    END_OF_INPUT = "END_OF_INPUT"
    MAX_ATTEMPTS_EXCEEDED = "MAX_ATTEMPTS_EXCEEDED"

    # Generic
    OS_ERROR = "OS_ERROR"
    UNKNOWN = "UNKNOWN"


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class BaseAppError(Exception):
    """
    Base application error with structured metadata.

    All askr errors derive from this class so callers can map any failure to an
    exit code and a message without inspecting the concrete type.
    """

    type: ErrorType
    code: ErrorCode
    user_message: str
    technical_message: str | None = None
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    retriable: bool = False
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Return user-friendly error message."""
        return self.user_message

    def __repr__(self) -> str:
        """Return detailed error representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"type={self.type.value}, "
            f"code={self.code.value}, "
            f"message='{self.user_message}'"
            f")"
        )

    @property
    def exit_code(self) -> ExitCode:
        """Exit code the process should terminate with for this error."""
        return _EXIT_CODES.get(self.code, ExitCode.VALIDATION_FAILED)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "type": self.type.value,
            "code": self.code.value,
            "user_message": self.user_message,
            "technical_message": self.technical_message,
            "severity": self.severity.value,
            "retriable": self.retriable,
            "exit_code": int(self.exit_code),
            "context": self.context,
        }


class ArgumentError(BaseAppError):
    """Invalid prompt configuration or command-line arguments."""

    def __init__(
        self,
        user_message: str,
        code: ErrorCode = ErrorCode.INVALID_ARGUMENT,
        technical_message: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(
            type=ErrorType.ARGUMENT,
            code=code,
            user_message=user_message,
            technical_message=technical_message,
            severity=ErrorSeverity.HIGH,
            context=context or {},
        )


class ValidationFailure(BaseAppError):
    """The final value did not satisfy the configured rules."""

    def __init__(
        self,
        user_message: str = "Validation failed",
        technical_message: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(
            type=ErrorType.VALIDATION,
            code=ErrorCode.VALIDATION_FAILED,
            user_message=user_message,
            technical_message=technical_message,
            severity=ErrorSeverity.MEDIUM,
            retriable=True,
            context=context or {},
        )


class TerminalFailure(BaseAppError):
    """The terminal cannot provide raw mode or capability information."""

    def __init__(
        self,
        user_message: str,
        code: ErrorCode = ErrorCode.TERMINAL_UNAVAILABLE,
        technical_message: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(
            type=ErrorType.TERMINAL,
            code=code,
            user_message=user_message,
            technical_message=technical_message,
            severity=ErrorSeverity.LOW,
            context=context or {},
        )


class IOFailure(BaseAppError):
    """Reading from or writing to the prompt streams failed."""

    def __init__(
        self,
        user_message: str,
        code: ErrorCode = ErrorCode.READ_FAILED,
        technical_message: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(
            type=ErrorType.IO,
            code=code,
            user_message=user_message,
            technical_message=technical_message,
            severity=ErrorSeverity.CRITICAL,
            context=context or {},
        )


class SessionEnded(BaseAppError):
    """A session reached a terminal state other than a successful submission."""

    def __init__(
        self,
        code: ErrorCode,
        user_message: str,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(
            type=ErrorType.SESSION,
            code=code,
            user_message=user_message,
            severity=ErrorSeverity.LOW,
            context=context or {},
        )


class SessionTimeout(SessionEnded):
    """No input arrived before the inactivity deadline."""

    def __init__(self, timeout: float | None = None):
        super().__init__(ErrorCode.TIMEOUT, "Timeout exceeded", {"timeout": timeout} if timeout else None)


class Interrupted(SessionEnded):
    """The user cancelled the prompt (Ctrl+C) or closed the input (Ctrl+D)."""

    def __init__(self, code: ErrorCode = ErrorCode.INTERRUPTED, user_message: str = "User interrupted"):
        super().__init__(code, user_message)


class MaxAttemptsExceeded(SessionEnded):
    """Every permitted submission attempt failed validation."""

    def __init__(self, attempts: int):
        super().__init__(
            ErrorCode.MAX_ATTEMPTS_EXCEEDED,
            "Maximum attempts exceeded",
            {"attempts": attempts},
        )


_EXIT_CODES: dict[ErrorCode, ExitCode] = {
    ErrorCode.INVALID_ARGUMENT: ExitCode.INVALID_ARGUMENTS,
    ErrorCode.INVALID_PATTERN: ExitCode.INVALID_ARGUMENTS,
    ErrorCode.INVALID_RANGE: ExitCode.INVALID_ARGUMENTS,
    ErrorCode.UNKNOWN_VALIDATOR: ExitCode.INVALID_ARGUMENTS,
    ErrorCode.CONFIG_INVALID: ExitCode.INVALID_ARGUMENTS,
    ErrorCode.MAX_ATTEMPTS_EXCEEDED: ExitCode.MAX_ATTEMPTS_EXCEEDED,
    ErrorCode.TIMEOUT: ExitCode.TIMEOUT,
    ErrorCode.INTERRUPTED: ExitCode.INTERRUPTED,
    ErrorCode.END_OF_INPUT: ExitCode.INTERRUPTED,
}


# Exception mapping configuration
_EXCEPTION_MAPPING: dict[type[Exception], tuple[type[BaseAppError], ErrorCode, str]] = {
    EOFError: (IOFailure, ErrorCode.READ_FAILED, "Unexpected end of input"),
    BrokenPipeError: (IOFailure, ErrorCode.WRITE_FAILED, "Output stream closed"),
    TimeoutError: (SessionEnded, ErrorCode.TIMEOUT, "Timeout exceeded"),
    OSError: (IOFailure, ErrorCode.OS_ERROR, "System error occurred"),
    ValueError: (ArgumentError, ErrorCode.INVALID_ARGUMENT, "Invalid argument provided"),
}


def map_exception(exc: Exception, context: dict[str, Any] | None = None) -> BaseAppError:
    """
    Map a built-in exception to an askr error.

    Args:
        exc: The exception to map
        context: Optional context information

    Returns:
        BaseAppError instance with appropriate type and metadata
    """
    context = context or {}

    if isinstance(exc, BaseAppError):
        return exc

    exc_type = type(exc)
    for mapped_type in exc_type.__mro__:
        if mapped_type not in _EXCEPTION_MAPPING:
            continue
        error_class, error_code, default_message = _EXCEPTION_MAPPING[mapped_type]
        user_message = str(exc) if str(exc) else default_message
        technical_message = f"{exc_type.__name__}: {exc}"

        if error_class is SessionEnded:
            result: BaseAppError = SessionEnded(error_code, default_message, context)
            result.technical_message = technical_message
            return result
        if error_class is ArgumentError:
            return ArgumentError(user_message, code=error_code, technical_message=technical_message, context=context)
        return IOFailure(user_message, code=error_code, technical_message=technical_message, context=context)

    logger.warning(f"Unknown exception type: {exc_type.__name__}: {exc}")
    return BaseAppError(
        type=ErrorType.SYSTEM,
        code=ErrorCode.UNKNOWN,
        user_message="An unexpected error occurred",
        technical_message=f"{exc_type.__name__}: {exc}",
        severity=ErrorSeverity.HIGH,
        context=context,
    )


def from_exception(exc: Exception, context: dict[str, Any] | None = None) -> BaseAppError:
    """
    Convert any exception to a BaseAppError.

    This is an alias for map_exception for convenience.
    """
    return map_exception(exc, context)
