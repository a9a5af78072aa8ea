"""Deployment preflight and local test suites.

Both suites run entirely against local files unless the preflight is asked
to reach the instance; they never create or change remote workflows.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from flowctl.clients.n8n import API_KEY_HEADER, N8nClient, WORKFLOWS_PATH
from flowctl.config import InstanceConfig, ValidationConfig
from flowctl.core.exceptions import AuthenticationError, ConfigError, DocumentError, N8nError
from flowctl.core.logging import StructuredLogger
from flowctl.core.utils import find_workflow_files, read_json_file
from flowctl.workflows.deployer import plan_deployment
from flowctl.workflows.results import CheckResult, SuiteResult
from flowctl.workflows.validator import validate_document, validate_file, validate_paths, validate_text

if TYPE_CHECKING:
    import httpx

logger = StructuredLogger(__name__)


def _pick_sample(fixture: str | Path | None, workflows_dir: str | Path | None) -> Path | None:
    if fixture and Path(fixture).is_file():
        return Path(fixture)
    if workflows_dir:
        files = find_workflow_files(workflows_dir)
        if files:
            return files[0]
    return None


def check_environment(
    instance: InstanceConfig,
    name: str = "default",
    dry_run: bool = False,
) -> tuple[CheckResult, InstanceConfig | None]:
    """Check the instance has a base URL and API key.

    In dry-run mode missing values are replaced with placeholders.
    """
    try:
        instance.require(name)
    except ConfigError as e:
        if not dry_run:
            return CheckResult("Environment", success=False, message=e.message), None
        return (
            CheckResult(
                "Environment",
                success=True,
                warning=True,
                message="Using placeholder values for dry run",
                details=[e.message],
            ),
            instance.with_dry_run_defaults(),
        )

    return (
        CheckResult("Environment", success=True, message=f"Base URL: {instance.get_base_url()}"),
        instance,
    )


def check_auth_header(client: N8nClient) -> CheckResult:
    """Check the API key header can be built."""
    try:
        headers = client.auth_headers()
    except AuthenticationError as e:
        return CheckResult("Auth header", success=False, message=e.message)

    if API_KEY_HEADER not in headers:
        return CheckResult("Auth header", success=False, message=f"{API_KEY_HEADER} header missing")
    return CheckResult(
        "Auth header",
        success=True,
        message=f"{API_KEY_HEADER}: {client.masked_api_key()}",
    )


def check_request_format(sample: Path | None) -> CheckResult:
    """Check a sample workflow parses and maps to a create or update call."""
    if sample is None:
        return CheckResult(
            "Request format",
            success=True,
            warning=True,
            message="No workflow file found to test",
        )

    try:
        _, document = read_json_file(sample)
    except DocumentError as e:
        return CheckResult("Request format", success=False, message=f"{sample}: {e.message}")

    if not isinstance(document, dict):
        return CheckResult(
            "Request format",
            success=False,
            message=f"{sample}: workflow document must be a JSON object",
        )

    plan = plan_deployment(document)
    return CheckResult(
        "Request format",
        success=True,
        message=f"{plan.method} {plan.path}",
        details=[f"File: {sample}", f"Workflow: {document.get('name') or '(unnamed)'}"],
    )


def check_connectivity(client: N8nClient, dry_run: bool = False) -> CheckResult:
    """List workflows to prove the instance is reachable and the key works."""
    if dry_run:
        return CheckResult(
            "Connectivity",
            success=True,
            skipped=True,
            message=f"Would call GET {client.base_url}{WORKFLOWS_PATH}",
        )

    try:
        workflows = client.list_workflows()
    except AuthenticationError as e:
        return CheckResult("Connectivity", success=False, message=f"Authentication failed: {e.message}")
    except N8nError as e:
        return CheckResult("Connectivity", success=False, message=f"Connection failed: {e.message}")

    return CheckResult(
        "Connectivity",
        success=True,
        message=f"Connected ({len(workflows)} workflow(s) visible)",
    )


def check_error_handling(rules: ValidationConfig | None = None) -> CheckResult:
    """Check the validator rejects malformed documents."""
    details = []

    invalid_json = validate_text('{"name": "broken",', source="<invalid-json>", rules=rules)
    if invalid_json.passed:
        details.append("Invalid JSON was not rejected")

    missing_name = validate_document({"nodes": [], "connections": {}}, source="<missing-name>", rules=rules)
    if missing_name.passed:
        details.append("Document without a name was not rejected")

    if details:
        return CheckResult("Error handling", success=False, message="Validator accepted bad input", details=details)
    return CheckResult("Error handling", success=True, message="Invalid JSON and missing name detected")


def run_preflight(
    instance: InstanceConfig,
    fixture: str | Path | None = None,
    workflows_dir: str | Path | None = None,
    dry_run: bool = False,
    instance_name: str = "default",
    http_client: httpx.Client | None = None,
    rules: ValidationConfig | None = None,
) -> SuiteResult:
    """Run the deployment preflight checks.

    Args:
        instance: Instance to check
        fixture: Sample workflow used for the request format check
        workflows_dir: Fallback source of a sample workflow
        dry_run: Use placeholders and skip network calls
        instance_name: Instance name, used in error messages
        http_client: Optional pre-built HTTP client (tests)
        rules: Validation rules

    Returns:
        SuiteResult; a real run stops after a failed environment check
    """
    suite = SuiteResult(name="preflight", started_at=datetime.now())

    env_check, resolved = check_environment(instance, instance_name, dry_run)
    suite.add(env_check)
    if resolved is None:
        suite.completed_at = datetime.now()
        return suite

    client = N8nClient(resolved, http_client=http_client)
    try:
        suite.add(check_auth_header(client))
        suite.add(check_request_format(_pick_sample(fixture, workflows_dir)))
        suite.add(check_connectivity(client, dry_run))
        suite.add(check_error_handling(rules))
    finally:
        if http_client is None:
            client.close()

    suite.completed_at = datetime.now()
    logger.info("Preflight finished", passed=suite.passed_count, failed=suite.failed_count)
    return suite


def run_local_suite(
    workflows_dir: str | Path,
    fixture: str | Path | None,
    instance: InstanceConfig,
    instance_name: str = "default",
    rules: ValidationConfig | None = None,
) -> SuiteResult:
    """Run the offline checks: validate workflows, the fixture, then a dry-run preflight."""
    suite = SuiteResult(name="local", started_at=datetime.now())

    files = find_workflow_files(workflows_dir)
    if not files:
        suite.add(
            CheckResult(
                "Validate workflows",
                success=True,
                message=f"No workflow files found in {workflows_dir}",
            )
        )
    else:
        summary = validate_paths(files, rules)
        suite.add(
            CheckResult(
                "Validate workflows",
                success=summary.success,
                warning=summary.warnings > 0,
                message=f"{summary.passed}/{summary.total} valid, {summary.warnings} warning(s)",
                details=[f"{r.source}: {e}" for r in summary.results for e in r.errors],
            )
        )

    if fixture and Path(fixture).is_file():
        result = validate_file(fixture, rules)
        suite.add(
            CheckResult(
                "Validate fixture",
                success=result.passed,
                message=f"{fixture}: {'valid' if result.passed else 'invalid'}",
                details=list(result.errors),
            )
        )
    else:
        suite.add(
            CheckResult(
                "Validate fixture",
                success=True,
                skipped=True,
                message=f"Fixture not found: {fixture}",
            )
        )

    suite.extend(
        run_preflight(
            instance,
            fixture=fixture,
            workflows_dir=workflows_dir,
            dry_run=True,
            instance_name=instance_name,
            rules=rules,
        )
    )

    suite.completed_at = datetime.now()
    return suite
