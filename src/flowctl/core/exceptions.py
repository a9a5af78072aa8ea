"""Custom exceptions for flowctl."""

from typing import Any


class FlowCtlError(Exception):
    """Base exception for all flowctl errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ConfigError(FlowCtlError):
    """Configuration-related errors."""

    pass


class DocumentError(FlowCtlError):
    """A workflow file could not be read or parsed."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.path = path


class N8nError(FlowCtlError):
    """n8n API errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code


class AuthenticationError(N8nError):
    """Authentication/authorization errors (HTTP 401/403)."""

    pass
