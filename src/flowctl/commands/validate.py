"""Validate command."""

from pathlib import Path

import click
from rich.markup import escape

from flowctl.core.context import pass_context, FlowCtlContext
from flowctl.core.output import format_counts
from flowctl.core.utils import find_workflow_files
from flowctl.workflows.validator import ValidationSummary, validate_paths


@click.command()
@click.argument("files", nargs=-1, type=click.Path())
@pass_context
def validate(ctx: FlowCtlContext, files: tuple[str, ...]) -> None:
    """Validate workflow JSON files.

    With no FILES, every *.json file in the workflows directory is checked.
    Exits 1 if any file has errors; warnings never fail.

    \b
    Examples:
        flowctl validate
        flowctl validate workflows/order-sync.json
    """
    if files:
        paths = [Path(f) for f in files]
    else:
        directory = Path(ctx.workflows_dir)
        if not directory.is_dir():
            ctx.output.print_warning(f"Workflows directory not found: {escape(str(directory))}")
            return
        paths = find_workflow_files(directory)
        if not paths:
            ctx.output.print_info(f"No workflow files found in {escape(str(directory))}")
            return

    summary = validate_paths(paths, ctx.config.validation)
    print_summary(ctx, summary)

    if not summary.success:
        raise SystemExit(1)


def print_summary(ctx: FlowCtlContext, summary: ValidationSummary) -> None:
    """Print per-file results followed by the tally."""
    if ctx.output.structured:
        ctx.output.print_data(
            {
                "total": summary.total,
                "passed": summary.passed,
                "failed": summary.failed,
                "warnings": summary.warnings,
                "results": [r.to_dict() for r in summary.results],
            }
        )
        return

    for result in summary.results:
        if result.passed:
            label = result.source
            if result.node_count is not None:
                label = f"{label} ({result.node_count} nodes)"
            ctx.output.print_success(escape(label))
            ctx.output.print_issues(warnings=result.warnings)
        else:
            ctx.output.print_failure(escape(result.source))
            ctx.output.print_issues(result.errors, result.warnings)

    counts = format_counts(summary.passed, summary.failed, summary.warnings)
    ctx.output.print_tally(
        "Validation Summary",
        {
            "Total": summary.total,
            "Passed": summary.passed,
            "Failed": summary.failed,
            "Warnings": summary.warnings,
        },
        summary.success,
        f"All workflows valid ({counts})" if summary.success else f"Validation failed ({counts})",
    )
