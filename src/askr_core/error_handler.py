"""
Centralized error handling and logging infrastructure for askr.

This module provides a singleton ErrorHandler that captures, logs, and translates
exceptions into user-facing messages while keeping full diagnostic information in
a rotating log file. The terminal belongs to the prompt, so nothing is logged to
the console.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
import traceback
from collections.abc import Callable
from typing import Any, ClassVar

from .config import get_log_dir
from .errors import BaseAppError, from_exception

ErrorListener = Callable[[BaseAppError], None]


class _AppCodeFilter(logging.Filter):
    """Give records from plain module loggers an empty error code."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "app_code"):
            record.app_code = "-"
        return True


class ErrorHandler:
    """
    Centralized error handler with logging and user message translation.

    This singleton class provides:
    - Exception capture and normalization
    - Structured logging with rotation
    - Listener notification for front ends that show diagnostics
    """

    _instance: ClassVar[ErrorHandler | None] = None
    _logger: ClassVar[logging.Logger | None] = None

    def __new__(cls) -> ErrorHandler:
        """Ensure singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        """Initialize the error handler (called only once due to singleton)."""
        if hasattr(self, "_initialized"):
            return

        self._initialized = True
        self._listeners: list[ErrorListener] = []
        self._original_excepthook = sys.excepthook

        self._setup_logging()

    def add_listener(self, listener: ErrorListener) -> None:
        """Register a callback invoked with every handled error."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: ErrorListener) -> None:
        """Unregister a callback previously passed to add_listener."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def capture(self, exception: Exception, context: dict[str, Any] | None = None) -> BaseAppError:
        """
        Capture and normalize an exception into a BaseAppError.

        Args:
            exception: The exception to capture
            context: Optional context information

        Returns:
            BaseAppError with normalized metadata
        """
        safe_context = self._sanitize_context(context or {})

        app_error = from_exception(exception, safe_context)
        if safe_context:
            app_error.context.update(safe_context)

        if not app_error.technical_message:
            app_error.technical_message = f"{type(exception).__name__}: {exception}"

        if "traceback" not in app_error.context:
            tb_str = traceback.format_exc()
            if tb_str == "NoneType: None\n":
                tb_str = f"{type(exception).__name__}: {exception}\n"
            app_error.context["traceback"] = tb_str

        return app_error

    def handle(self, exception: Exception, context: dict[str, Any] | None = None) -> BaseAppError:
        """
        Handle an exception by capturing, logging, and notifying listeners.

        Args:
            exception: The exception to handle
            context: Optional context information

        Returns:
            BaseAppError for further processing
        """
        if isinstance(exception, SystemExit | KeyboardInterrupt):
            raise exception

        app_error = self.capture(exception, context)

        if self._logger:
            self._logger.error(
                f"[{app_error.code.value}] {app_error.user_message}",
                extra={
                    "app_code": app_error.code.value,
                    "error_type": app_error.type.value,
                    "severity": app_error.severity.value,
                    "retriable": app_error.retriable,
                },
                exc_info=exception,
            )

        for listener in list(self._listeners):
            listener(app_error)

        return app_error

    def to_user_message(self, app_error: BaseAppError) -> str:
        """
        Generate a concise, user-facing message from a BaseAppError.

        Args:
            app_error: The error to convert

        Returns:
            Message string suitable for stderr
        """
        message = app_error.user_message
        if app_error.retriable:
            message += ". You can try again."
        return message

    def _setup_logging(self) -> None:
        """Set up rotating file logging in the askr state directory."""
        ErrorHandler._logger = logging.getLogger("askr.errors")
        ErrorHandler._logger.setLevel(logging.DEBUG)
        ErrorHandler._logger.propagate = False

        if ErrorHandler._logger.handlers:
            return

        try:
            logs_dir = get_log_dir()
            logs_dir.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                logs_dir / "askr.log",
                maxBytes=5_242_880,  # 5MB
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.addFilter(_AppCodeFilter())
            file_handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s | %(levelname)s | %(name)s | code=%(app_code)s | %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
            ErrorHandler._logger.addHandler(file_handler)
        except OSError as e:
            # Unwritable state directory: keep the prompt usable without a log file
            ErrorHandler._logger.addHandler(logging.NullHandler())
            logging.getLogger(__name__).debug(f"Failed to setup error logging: {e}")

    def _sanitize_context(self, context: dict[str, Any]) -> dict[str, Any]:
        """
        Sanitize context to prevent sensitive data leakage.

        Masked prompt input must never reach the log, so any key naming a value
        or a secret is redacted.

        Args:
            context: Raw context dictionary

        Returns:
            Sanitized context dictionary
        """
        safe_context: dict[str, Any] = {}
        max_items = 20

        for item_count, (key, value) in enumerate(context.items()):
            if item_count >= max_items:
                safe_context["..."] = f"({len(context) - max_items} more items truncated)"
                break

            if any(sensitive in key.lower() for sensitive in ["password", "token", "secret", "value", "input"]):
                safe_context[key] = "[REDACTED]"
            elif isinstance(value, str) and len(value) > 200:
                safe_context[key] = value[:200] + "..."
            else:
                safe_context[key] = repr(value)[:200]

        return safe_context

    def install_hooks(self) -> None:
        """Install an exception hook for unhandled exceptions."""

        def exception_hook(exc_type: type[BaseException], exc_value: BaseException, exc_traceback: Any) -> None:
            """Log unhandled exceptions before the default hook prints them."""
            if isinstance(exc_value, Exception):
                self.handle(exc_value, {"source": "sys.excepthook"})
            self._original_excepthook(exc_type, exc_value, exc_traceback)

        sys.excepthook = exception_hook

    def restore_hooks(self) -> None:
        """Restore the original exception hook."""
        sys.excepthook = self._original_excepthook


def get_error_handler() -> ErrorHandler:
    """
    Get the global ErrorHandler instance.

    Returns:
        The singleton ErrorHandler instance
    """
    return ErrorHandler()


def setup_error_handling() -> ErrorHandler:
    """
    Set up global error handling for the application.

    This should be called once during application startup.

    Returns:
        The configured ErrorHandler instance
    """
    handler = get_error_handler()
    handler.install_hooks()
    return handler


def init_logging(level: int = logging.WARNING) -> None:
    """
    Initialize logging configuration.

    Module loggers write to the same rotating file as the ErrorHandler so that
    diagnostics never interleave with the prompt on the terminal.
    """
    handler = get_error_handler()

    root = logging.getLogger("askr_core")
    tui = logging.getLogger("askr_tui")
    for module_logger in (root, tui):
        module_logger.setLevel(level)
        if handler._logger and not module_logger.handlers:
            for log_handler in handler._logger.handlers:
                module_logger.addHandler(log_handler)
