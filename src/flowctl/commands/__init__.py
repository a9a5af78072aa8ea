"""flowctl commands."""

from flowctl.config import InstanceConfig
from flowctl.core.context import FlowCtlContext
from flowctl.core.exceptions import ConfigError


def resolve_instance(ctx: FlowCtlContext, name: str | None = None) -> InstanceConfig:
    """Get a fully configured instance or exit before doing any work."""
    try:
        return ctx.require_instance(name)
    except ConfigError as e:
        ctx.output.print_error(e.message, label="Configuration error")
        raise SystemExit(1)
