"""Structured logging configuration for flowctl."""

import logging
import sys
from enum import Enum
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

from flowctl.core.utils import mask_secret

# Third-party loggers that are too chatty below WARNING
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")

# Context keys whose values are masked before they reach a log line
SENSITIVE_KEYS = frozenset({"api_key", "password", "secret", "token"})


class LogLevel(str, Enum):
    """Log level enumeration."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def level_for(verbose: int, quiet: bool, default: LogLevel = LogLevel.WARNING) -> LogLevel:
    """Map -v/-q flags to a log level; flags override the configured default."""
    if verbose >= 2:
        return LogLevel.DEBUG
    if verbose == 1:
        return LogLevel.INFO
    if quiet:
        return LogLevel.ERROR
    return default


def _build_handler(rich_output: bool) -> logging.Handler:
    if rich_output:
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        return handler

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    return handler


def setup_logging(
    level: LogLevel = LogLevel.WARNING,
    rich_output: bool = True,
) -> logging.Logger:
    """Configure logging for flowctl.

    Replaces any handlers on the root logger, so calling it again (one
    context per CLI invocation) does not duplicate output.

    Args:
        level: The logging level
        rich_output: Whether to use Rich for formatted output

    Returns:
        The flowctl package logger
    """
    log_level = getattr(logging, level.value.upper())

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(_build_handler(rich_output))
    root_logger.setLevel(log_level)

    logger = logging.getLogger("flowctl")
    logger.setLevel(log_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the flowctl namespace.

    Args:
        name: Module name (typically __name__) or a short component name

    Returns:
        Logger instance
    """
    if name == "flowctl" or name.startswith("flowctl."):
        return logging.getLogger(name)
    return logging.getLogger(f"flowctl.{name}")


def _format_value(key: str, value: Any) -> str:
    if key in SENSITIVE_KEYS:
        return mask_secret(str(value) if value is not None else None)
    text = str(value)
    if not text or any(c.isspace() for c in text):
        return repr(text)
    return text


class StructuredLogger:
    """Logger that appends ``key=value`` context to each message.

    Values under sensitive keys (api_key, password, ...) are masked and
    values containing whitespace are quoted, so workflow names and paths
    stay unambiguous.
    """

    def __init__(self, name: str):
        self._logger = get_logger(name)
        self._context: dict[str, Any] = {}

    @property
    def name(self) -> str:
        return self._logger.name

    def bind(self, **kwargs: Any) -> "StructuredLogger":
        """Create a new logger with additional context."""
        new_logger = StructuredLogger(self._logger.name)
        new_logger._context = {**self._context, **kwargs}
        return new_logger

    def _format_message(self, message: str, **kwargs: Any) -> str:
        context = {**self._context, **kwargs}
        if not context:
            return message
        context_str = " ".join(f"{k}={_format_value(k, v)}" for k, v in context.items())
        return f"{message} [{context_str}]"

    def debug(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        self._logger.error(self._format_message(message, **kwargs))
