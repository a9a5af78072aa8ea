"""Commands that inspect or change workflows on the instance."""

import click

from flowctl.commands import resolve_instance
from flowctl.core.context import pass_context, FlowCtlContext
from flowctl.core.exceptions import N8nError
from flowctl.workflows.schema import WorkflowSummary


@click.command("list")
@pass_context
def list_workflows(ctx: FlowCtlContext) -> None:
    """List workflows on the n8n instance."""
    resolve_instance(ctx)

    if ctx.dry_run:
        ctx.log_dry_run("Would list workflows", {"instance": ctx.instance_name})
        return

    try:
        workflows = ctx.n8n.list_workflows()
    except N8nError as e:
        ctx.output.print_error(f"Failed to list workflows: {e.message}")
        raise SystemExit(1)

    summaries = [
        WorkflowSummary.model_validate(w)
        for w in workflows
        if isinstance(w, dict) and w.get("id") is not None
    ]
    if not summaries:
        ctx.output.print_info("No workflows found")
        return

    ctx.output.print_data(
        [s.to_row() for s in summaries],
        headers=["ID", "Name", "Active", "Nodes", "Updated"],
        title=f"Workflows ({len(summaries)} found)",
    )


@click.command("delete")
@click.argument("workflow_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@pass_context
def delete_workflow(ctx: FlowCtlContext, workflow_id: str, yes: bool) -> None:
    """Delete a workflow from the n8n instance."""
    resolve_instance(ctx)

    if not yes and not ctx.confirm(f"Delete workflow {workflow_id}?"):
        ctx.output.print_info("Aborted")
        return

    if ctx.dry_run:
        ctx.log_dry_run("Would delete workflow", {"id": workflow_id})
        return

    try:
        ctx.n8n.delete_workflow(workflow_id)
    except N8nError as e:
        ctx.output.print_error(f"Failed to delete workflow {workflow_id}: {e.message}")
        raise SystemExit(1)

    ctx.output.print_success(f"Deleted workflow {workflow_id}")
