"""Test harness commands - local checks, deployment preflight, integration."""

import click
from rich.markup import escape

from flowctl.commands import resolve_instance
from flowctl.core.context import pass_context, FlowCtlContext
from flowctl.core.output import format_counts
from flowctl.workflows.harness import run_local_suite, run_preflight
from flowctl.workflows.integration import IntegrationSuite
from flowctl.workflows.results import SuiteResult

fixture_option = click.option(
    "--fixture",
    "-f",
    type=click.Path(dir_okay=False),
    help="Sample workflow file (default: tests/fixtures/test-workflow.json)",
)


@click.group()
@pass_context
def test(ctx: FlowCtlContext) -> None:
    """Run workflow test suites.

    \b
    Examples:
        flowctl test local
        flowctl --dry-run test deploy
        flowctl -i test test integration
    """
    pass


@test.command("local")
@fixture_option
@pass_context
def local(ctx: FlowCtlContext, fixture: str | None) -> None:
    """Validate workflows and the fixture, then run a dry-run preflight."""
    suite = run_local_suite(
        ctx.workflows_dir,
        fixture or ctx.config.global_settings.fixture,
        ctx.instance,
        instance_name=ctx.instance_name,
        rules=ctx.config.validation,
    )
    print_suite(ctx, suite, "Local Test Summary")
    if not suite.success:
        raise SystemExit(1)


@test.command("deploy")
@fixture_option
@pass_context
def deploy(ctx: FlowCtlContext, fixture: str | None) -> None:
    """Check the instance is ready for deployment.

    Verifies credentials, request formatting, connectivity and error
    handling. With --dry-run no requests are made.
    """
    suite = run_preflight(
        ctx.instance,
        fixture=fixture or ctx.config.global_settings.fixture,
        workflows_dir=ctx.workflows_dir,
        dry_run=ctx.dry_run,
        instance_name=ctx.instance_name,
        rules=ctx.config.validation,
    )
    print_suite(ctx, suite, "Deployment Test Summary")
    if not suite.success:
        raise SystemExit(1)


@test.command("integration")
@fixture_option
@pass_context
def integration(ctx: FlowCtlContext, fixture: str | None) -> None:
    """Deploy, verify and activate a throwaway workflow on the test instance.

    Uses N8N_TEST_BASE_URL / N8N_TEST_API_KEY (falling back to N8N_BASE_URL /
    N8N_API_KEY). The created workflow is always deleted afterwards.
    """
    instance = resolve_instance(ctx, "test")
    fixture_path = fixture or ctx.config.global_settings.fixture

    if ctx.dry_run:
        ctx.log_dry_run(
            "Would run integration tests",
            {"url": instance.get_base_url(), "fixture": fixture_path},
        )
        return

    ctx.output.print_info(f"Test instance: {instance.get_base_url()}")
    suite = IntegrationSuite(ctx.client_for("test"), fixture_path).run()
    print_suite(ctx, suite, "Integration Test Summary")
    if not suite.success:
        raise SystemExit(1)


def print_suite(ctx: FlowCtlContext, suite: SuiteResult, title: str) -> None:
    """Print each check and the suite tally."""
    if ctx.output.structured:
        ctx.output.print_data(suite.to_dict())
        return

    for check in suite.checks:
        ctx.output.print_status(check.status, f"{check.name}: {escape(check.message or '')}")
        if check.details and (not check.success or ctx.verbose):
            for detail in check.details:
                ctx.output.print(f"    [dim]{escape(detail)}[/dim]")

    counts = format_counts(suite.passed_count, suite.failed_count)
    ctx.output.print_tally(
        title,
        {
            "Passed": suite.passed_count,
            "Failed": suite.failed_count,
            "Warnings": suite.warning_count,
        },
        suite.success,
        f"All checks passed ({counts})" if suite.success else f"Some checks failed ({counts})",
    )
