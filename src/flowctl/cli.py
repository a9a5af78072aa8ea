"""Main CLI entry point for flowctl."""

import sys
from typing import Any

import click
from rich.console import Console

from flowctl import __version__
from flowctl.config import load_config
from flowctl.core.context import FlowCtlContext
from flowctl.core.output import OutputFormat
from flowctl.core.exceptions import FlowCtlError, ConfigError
from flowctl.core.utils import mask_secret


CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 120,
}


class OutputFormatType(click.ParamType):
    """Custom Click parameter type for output format."""

    name = "format"

    def convert(
        self,
        value: Any,
        param: click.Parameter | None,
        ctx: click.Context | None,
    ) -> OutputFormat:
        if isinstance(value, OutputFormat):
            return value
        try:
            return OutputFormat(value.lower())
        except ValueError:
            self.fail(
                f"Invalid format '{value}'. Choose from: table, json, yaml, raw",
                param,
                ctx,
            )


OUTPUT_FORMAT = OutputFormatType()


def use_color(setting: str, no_color: bool = False) -> bool:
    """Resolve the configured colour mode; --no-color always wins."""
    if no_color or setting == "never":
        return False
    if setting == "always":
        return True
    return sys.stdout.isatty()


def print_version(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    console = Console()
    console.print(f"flowctl version {__version__}")
    ctx.exit()


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "-i",
    "--instance",
    metavar="NAME",
    envvar="FLOWCTL_INSTANCE",
    help="n8n instance to use (default, test, ...)",
)
@click.option(
    "-o",
    "--output",
    "output_format",
    type=OUTPUT_FORMAT,
    metavar="FORMAT",
    help="Output format: table, json, yaml, raw",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for info, -vv for debug)",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    help="Suppress non-essential output",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would happen without calling the n8n API",
)
@click.option(
    "--no-color",
    is_flag=True,
    help="Disable colored output",
)
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True),
    metavar="FILE",
    envvar="FLOWCTL_CONFIG",
    help="Path to config file",
)
@click.option(
    "--version",
    is_flag=True,
    callback=print_version,
    expose_value=False,
    is_eager=True,
    help="Show version and exit",
)
@click.pass_context
def cli(
    ctx: click.Context,
    instance: str | None,
    output_format: OutputFormat | None,
    verbose: int,
    quiet: bool,
    dry_run: bool,
    no_color: bool,
    config_file: str | None,
) -> None:
    """flowctl - version control and CI/CD for n8n workflows.

    Validates workflow JSON files, exports and imports them through the
    n8n REST API, and runs deployment and integration checks.

    \b
    Examples:
        flowctl validate
        flowctl export --output-dir workflows/
        flowctl import workflows/order-sync.json
        flowctl test local

    \b
    Configuration:
        N8N_BASE_URL, N8N_API_KEY            Default instance
        N8N_TEST_BASE_URL, N8N_TEST_API_KEY  Test instance
        credentials/.env, .env               Dotenv files
        ./flowctl.yaml                       Project configuration
        ~/.flowctl/config.yaml               User configuration
    """
    try:
        config = load_config(config_file)
        config.get_instance(instance)

        ctx.obj = FlowCtlContext(
            config=config,
            instance=instance,
            output_format=output_format,
            verbose=verbose,
            quiet=quiet,
            dry_run=dry_run,
            color=use_color(config.global_settings.color, no_color),
        )

        if ctx.obj.dry_run and not quiet:
            ctx.obj.output.print_warning("Dry-run mode enabled - no API calls will be made")

    except ConfigError as e:
        console = Console(stderr=True)
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)

    ctx.call_on_close(ctx.obj.close)


def register_commands() -> None:
    """Register all commands."""
    from flowctl.commands.validate import validate
    from flowctl.commands.sync import export_workflows, import_workflows
    from flowctl.commands.remote import list_workflows, delete_workflow
    from flowctl.commands.test import test
    from flowctl.commands.mock import mock_server

    cli.add_command(validate)
    cli.add_command(export_workflows)
    cli.add_command(import_workflows)
    cli.add_command(list_workflows)
    cli.add_command(delete_workflow)
    cli.add_command(test)
    cli.add_command(mock_server)


register_commands()


@cli.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration (API keys are masked)."""
    flowctl_ctx: FlowCtlContext = ctx.obj
    settings = flowctl_ctx.config.global_settings
    config_data = {
        "instance": flowctl_ctx.instance_name,
        "output_format": flowctl_ctx.output_format.value,
        "dry_run": flowctl_ctx.dry_run,
        "verbose": flowctl_ctx.verbose,
        "workflows_dir": settings.workflows_dir,
        "fixture": settings.fixture,
        "instances": {
            name: {
                "base_url": instance.get_base_url() or "-",
                "api_key": mask_secret(instance.get_api_key()),
                "timeout": instance.timeout,
            }
            for name, instance in flowctl_ctx.config.instances.items()
        },
    }

    if flowctl_ctx.output.structured:
        flowctl_ctx.output.print_data(config_data)
        return

    instances = config_data.pop("instances")
    flowctl_ctx.output.print_data(config_data, title="Current Configuration")
    flowctl_ctx.output.print_data(
        [{"Instance": name, "Base URL": i["base_url"], "API Key": i["api_key"]} for name, i in instances.items()],
        headers=["Instance", "Base URL", "API Key"],
        title="Instances",
    )


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except FlowCtlError as e:
        console = Console(stderr=True)
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        console = Console(stderr=True)
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
