"""Export and import commands."""

from pathlib import Path

import click
from rich.markup import escape

from flowctl.commands import resolve_instance
from flowctl.core.context import pass_context, FlowCtlContext
from flowctl.core.exceptions import N8nError
from flowctl.core.output import format_counts
from flowctl.workflows.deployer import WorkflowDeployer
from flowctl.workflows.exporter import WorkflowExporter


@click.command("export")
@click.argument("ids", nargs=-1)
@click.option(
    "--output-dir",
    "-d",
    type=click.Path(file_okay=False),
    help="Directory to write workflow files to (default: workflows directory)",
)
@pass_context
def export_workflows(ctx: FlowCtlContext, ids: tuple[str, ...], output_dir: str | None) -> None:
    """Export workflows from n8n to JSON files.

    With no IDS, every workflow on the instance is exported. Files are named
    after the workflow (e.g. "Order Sync" -> order-sync.json) and existing
    files are overwritten.

    \b
    Examples:
        flowctl export
        flowctl export abc123 def456 --output-dir backup/
    """
    resolve_instance(ctx)
    target = Path(output_dir or ctx.workflows_dir)

    if ctx.dry_run:
        ctx.log_dry_run(
            "Would export workflows",
            {"ids": ", ".join(ids) or "all", "output_dir": target},
        )

    exporter = WorkflowExporter(
        None if ctx.dry_run else ctx.n8n,
        target,
        dry_run=ctx.dry_run,
    )

    try:
        result = exporter.export(list(ids) or None)
    except N8nError as e:
        ctx.output.print_error(f"Failed to list workflows: {e.message}")
        raise SystemExit(1)

    if ctx.output.structured:
        ctx.output.print_data(result.to_dict())
    else:
        for path in result.files:
            ctx.output.print_success(f"Exported {escape(str(path))}")
        for failure in result.failures:
            ctx.output.print_failure(f"{escape(failure.workflow_id)}: {escape(failure.error)}")
        ctx.output.print_info(f"Export complete: {result.exported} exported, {result.failed} failed")

    if not result.success:
        raise SystemExit(1)


@click.command("import")
@click.argument("files", nargs=-1, type=click.Path())
@click.option(
    "--skip-validation",
    is_flag=True,
    help="Send documents without validating them first",
)
@pass_context
def import_workflows(ctx: FlowCtlContext, files: tuple[str, ...], skip_validation: bool) -> None:
    """Import (create or update) workflows from JSON files.

    A file with an "id" updates that workflow (its "active" flag is left
    alone); a file without one creates a new workflow.

    \b
    Examples:
        flowctl import workflows/order-sync.json
        flowctl --dry-run import workflows/*.json
    """
    if not files:
        raise click.UsageError("No workflow files specified. Usage: flowctl import FILES...")

    resolve_instance(ctx)

    deployer = WorkflowDeployer(
        None if ctx.dry_run else ctx.n8n,
        dry_run=ctx.dry_run,
        validate=not skip_validation,
        rules=ctx.config.validation,
    )
    result = deployer.deploy(files)

    if ctx.output.structured:
        ctx.output.print_data(
            {
                "imported": result.imported,
                "failed": result.failed,
                "items": [item.to_dict() for item in result.items],
            }
        )
    else:
        for item in result.items:
            if not item.success:
                ctx.output.print_failure(f"{escape(item.path)}: {escape(item.error or 'failed')}")
            elif ctx.dry_run:
                ctx.log_dry_run(f"Would {item.action} {escape(item.path)}", {"id": item.workflow_id or "new"})
            else:
                ctx.output.print_success(f"{item.action.capitalize()}d {escape(item.path)} (ID: {item.workflow_id})")
        ctx.output.print_info(f"Import complete: {format_counts(result.imported, result.failed)}")

    if not result.success:
        raise SystemExit(1)
