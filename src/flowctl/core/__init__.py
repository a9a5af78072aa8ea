"""Core utilities and shared components for flowctl."""

# Note: Import context lazily to avoid circular imports
# Use: from flowctl.core.context import FlowCtlContext, pass_context
from flowctl.core.exceptions import (
    FlowCtlError,
    ConfigError,
    DocumentError,
    N8nError,
    AuthenticationError,
)
from flowctl.core.output import OutputFormatter

__all__ = [
    "FlowCtlError",
    "ConfigError",
    "DocumentError",
    "N8nError",
    "AuthenticationError",
    "OutputFormatter",
]
