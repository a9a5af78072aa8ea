"""Click context object for sharing state across commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from flowctl.config import FlowCtlConfig, InstanceConfig, get_default_config
from flowctl.core.output import OutputFormat, OutputFormatter
from flowctl.core.logging import level_for, setup_logging, StructuredLogger

if TYPE_CHECKING:
    from flowctl.clients.n8n import N8nClient


class FlowCtlContext:
    """Shared context object for flowctl commands.

    This object is passed through Click's context mechanism and provides
    access to configuration, the n8n client, and output utilities.
    """

    def __init__(
        self,
        config: FlowCtlConfig | None = None,
        instance: str | None = None,
        output_format: OutputFormat | None = None,
        verbose: int = 0,
        quiet: bool = False,
        dry_run: bool = False,
        color: bool = True,
    ):
        self._config = config or get_default_config()
        self._instance_name = instance or "default"

        # Output settings (CLI overrides config)
        self._output_format = output_format or self._config.global_settings.output_format
        self._verbose = verbose
        self._quiet = quiet
        self._dry_run = dry_run or self._config.global_settings.dry_run
        self._color = color

        setup_logging(
            level_for(verbose, quiet, self._config.global_settings.verbosity),
            rich_output=color,
        )
        self._logger = StructuredLogger("context")

        self._output = OutputFormatter(
            format=self._output_format,
            color=color,
            quiet=quiet,
        )

        # Lazy-loaded clients, keyed by instance name
        self._clients: dict[str, N8nClient] = {}

    @property
    def config(self) -> FlowCtlConfig:
        """Get the loaded configuration."""
        return self._config

    @property
    def instance_name(self) -> str:
        """Get the selected instance name."""
        return self._instance_name

    @property
    def instance(self) -> InstanceConfig:
        """Get the selected instance configuration."""
        return self._config.get_instance(self._instance_name)

    @property
    def workflows_dir(self) -> str:
        """Get the local workflows directory."""
        return self._config.global_settings.workflows_dir

    @property
    def output(self) -> OutputFormatter:
        """Get the output formatter."""
        return self._output

    @property
    def output_format(self) -> OutputFormat:
        """Get the output format."""
        return self._output_format

    @property
    def dry_run(self) -> bool:
        """Check if dry-run mode is enabled."""
        return self._dry_run

    @property
    def verbose(self) -> int:
        """Get verbosity level."""
        return self._verbose

    @property
    def quiet(self) -> bool:
        """Check if quiet mode is enabled."""
        return self._quiet

    @property
    def color(self) -> bool:
        """Check if color output is enabled."""
        return self._color

    @property
    def logger(self) -> StructuredLogger:
        """Get the context logger."""
        return self._logger

    @property
    def n8n(self) -> "N8nClient":
        """Get or create the n8n client for the selected instance."""
        return self.client_for(self._instance_name)

    def client_for(self, name: str) -> "N8nClient":
        """Get or create the n8n client for a named instance.

        Raises:
            ConfigError: If the instance is missing its URL or API key
        """
        if name not in self._clients:
            from flowctl.clients.n8n import N8nClient

            instance = self._config.get_instance(name).require(name)
            self._clients[name] = N8nClient(instance)
        return self._clients[name]

    def require_instance(self, name: str | None = None) -> InstanceConfig:
        """Validate that an instance is fully configured before doing any work.

        In dry-run mode no network calls are made, so placeholder values are
        substituted instead of failing.
        """
        instance_name = name or self._instance_name
        instance = self._config.get_instance(instance_name)
        if self._dry_run:
            return instance.with_dry_run_defaults()
        return instance.require(instance_name)

    def close(self) -> None:
        """Close any open API clients."""
        for client in self._clients.values():
            client.close()
        self._clients.clear()

    def confirm(self, message: str, default: bool = False) -> bool:
        """Ask for user confirmation.

        In dry-run mode, always returns True without prompting.
        """
        if self._dry_run:
            self._output.print(f"[dim]\\[dry-run] Would prompt: {message}[/dim]")
            return True
        return self._output.confirm(message, default)

    def log_dry_run(self, action: str, details: dict[str, Any] | None = None) -> None:
        """Log a dry-run action."""
        if self._dry_run:
            self._logger.info(f"Dry run: {action}", **(details or {}))
            msg = f"\\[dry-run] {action}"
            if details:
                detail_str = ", ".join(f"{k}={v}" for k, v in details.items())
                msg = f"{msg} ({detail_str})"
            self._output.print(f"[dim]{msg}[/dim]")


# Click decorator for passing context
pass_context = click.make_pass_decorator(FlowCtlContext, ensure=True)
