"""Tests for the preflight, local and integration suites."""

from unittest.mock import MagicMock

import pytest

from conftest import FIXTURE_WORKFLOW, TEST_API_KEY, TEST_BASE_URL
from flowctl.config import InstanceConfig
from flowctl.core.exceptions import AuthenticationError, N8nError
from flowctl.workflows.harness import (
    check_auth_header,
    check_connectivity,
    check_error_handling,
    check_environment,
    check_request_format,
    run_local_suite,
    run_preflight,
)
from flowctl.workflows.integration import IntegrationSuite
from flowctl.workflows.results import CheckResult, SuiteResult


class TestResults:
    """Tests for result types."""

    def test_suite_counts(self):
        suite = SuiteResult(name="s")
        suite.add(CheckResult("a", success=True))
        suite.add(CheckResult("b", success=True, warning=True))
        suite.add(CheckResult("c", success=True, skipped=True))
        suite.add(CheckResult("d", success=False, skipped=True))
        assert suite.passed_count == 2
        assert suite.failed_count == 1
        assert suite.warning_count == 1
        assert not suite.success

    def test_extend_prefixes_names(self):
        inner = SuiteResult(name="preflight", checks=[CheckResult("Environment", success=True)])
        outer = SuiteResult(name="local")
        outer.extend(inner)
        assert outer.checks[0].name == "preflight: Environment"

    def test_status(self):
        assert CheckResult("x", success=True).status == "passed"
        assert CheckResult("x", success=True, warning=True).status == "warning"
        assert CheckResult("x", success=False).status == "failed"
        assert CheckResult("x", success=False, skipped=True).status == "skipped"


class TestPreflightChecks:
    """Tests for individual preflight checks."""

    def test_environment_missing_real_run(self):
        check, resolved = check_environment(InstanceConfig(), "default", dry_run=False)
        assert not check.success
        assert "N8N_API_KEY" in check.message
        assert resolved is None

    def test_environment_missing_dry_run_uses_placeholders(self):
        check, resolved = check_environment(InstanceConfig(), "default", dry_run=True)
        assert check.success
        assert check.warning
        assert resolved.get_base_url() == "http://localhost:5678"
        assert resolved.get_api_key() == "dry-run-test-key"

    def test_environment_configured(self, instance_config):
        check, resolved = check_environment(instance_config)
        assert check.success
        assert not check.warning
        assert resolved is instance_config

    def test_auth_header_masks_key(self, n8n_client):
        check = check_auth_header(n8n_client)
        assert check.success
        assert check.message == f"X-N8N-API-KEY: {TEST_API_KEY[:8]}..."
        assert TEST_API_KEY not in check.message

    def test_request_format_create(self):
        check = check_request_format(FIXTURE_WORKFLOW)
        assert check.success
        assert check.message == "POST /api/v1/workflows"
        assert "Workflow: Test Workflow - Ping API" in check.details

    def test_request_format_update(self, write_workflow, valid_workflow):
        valid_workflow["id"] = "wf-5"
        check = check_request_format(write_workflow(valid_workflow))
        assert check.message == "PUT /api/v1/workflows/wf-5"

    def test_request_format_no_file(self):
        check = check_request_format(None)
        assert check.success
        assert check.warning

    def test_request_format_invalid_json(self, write_workflow):
        assert not check_request_format(write_workflow("{", "bad.json")).success

    def test_connectivity_dry_run_skips(self):
        client = MagicMock()
        client.base_url = TEST_BASE_URL
        check = check_connectivity(client, dry_run=True)
        assert check.skipped and check.success
        assert check.message == f"Would call GET {TEST_BASE_URL}/api/v1/workflows"
        client.list_workflows.assert_not_called()

    def test_connectivity_against_mock(self, n8n_client):
        check = check_connectivity(n8n_client)
        assert check.success
        assert "1 workflow(s)" in check.message

    def test_connectivity_auth_failure(self):
        client = MagicMock()
        client.list_workflows.side_effect = AuthenticationError("HTTP 403: Invalid API key", status_code=403)
        check = check_connectivity(client)
        assert not check.success
        assert check.message.startswith("Authentication failed")

    def test_error_handling(self):
        assert check_error_handling().success


class TestRunPreflight:
    """Tests for run_preflight."""

    def test_dry_run_without_config_passes(self):
        suite = run_preflight(InstanceConfig(), fixture=FIXTURE_WORKFLOW, dry_run=True)
        assert suite.success
        assert [c.name for c in suite.checks] == [
            "Environment",
            "Auth header",
            "Request format",
            "Connectivity",
            "Error handling",
        ]

    def test_real_run_without_config_stops(self):
        suite = run_preflight(InstanceConfig(), fixture=FIXTURE_WORKFLOW)
        assert not suite.success
        assert len(suite.checks) == 1

    def test_against_mock(self, instance_config, api_client):
        suite = run_preflight(instance_config, fixture=FIXTURE_WORKFLOW, http_client=api_client)
        assert suite.success
        assert suite.failed_count == 0

    def test_invalid_key_fails_connectivity(self, api_client):
        instance = InstanceConfig(base_url=TEST_BASE_URL, api_key="invalid-key")
        suite = run_preflight(instance, fixture=FIXTURE_WORKFLOW, http_client=api_client)
        connectivity = next(c for c in suite.checks if c.name == "Connectivity")
        assert not connectivity.success
        assert "Authentication failed" in connectivity.message


class TestLocalSuite:
    """Tests for run_local_suite."""

    def test_passes_with_valid_files(self, tmp_path, write_workflow, valid_workflow):
        write_workflow(valid_workflow)
        suite = run_local_suite(tmp_path / "workflows", FIXTURE_WORKFLOW, InstanceConfig())
        assert suite.success
        assert any(c.name.startswith("preflight: ") for c in suite.checks)

    def test_empty_directory_passes(self, tmp_path):
        suite = run_local_suite(tmp_path / "none", FIXTURE_WORKFLOW, InstanceConfig())
        assert suite.success
        assert "No workflow files" in suite.checks[0].message

    def test_invalid_workflow_fails(self, tmp_path, write_workflow):
        write_workflow({"nodes": []}, "bad.json")
        suite = run_local_suite(tmp_path / "workflows", FIXTURE_WORKFLOW, InstanceConfig())
        assert not suite.success
        assert not suite.checks[0].success
        assert any("name" in d for d in suite.checks[0].details)

    def test_missing_fixture_skipped(self, tmp_path):
        suite = run_local_suite(tmp_path / "none", tmp_path / "missing.json", InstanceConfig())
        fixture_check = suite.checks[1]
        assert fixture_check.skipped
        assert suite.success


class TestIntegrationSuite:
    """Tests for IntegrationSuite against the mock API."""

    def test_full_run_cleans_up(self, n8n_client):
        suite_runner = IntegrationSuite(n8n_client, FIXTURE_WORKFLOW)
        suite = suite_runner.run()

        assert suite.success, [c.to_dict() for c in suite.checks]
        assert [c.name for c in suite.checks] == [
            "API connectivity",
            "Deploy workflow",
            "Verify workflow",
            "Activate workflow",
        ]
        assert suite_runner.workflow_name.startswith("Integration Test - ")
        assert suite_runner.cleanup_error is None
        assert [w["id"] for w in n8n_client.list_workflows()] == ["test-workflow-1"]

    def test_missing_fixture_skips_later_steps(self, n8n_client, tmp_path):
        suite = IntegrationSuite(n8n_client, tmp_path / "missing.json").run()

        assert not suite.success
        assert suite.failed_count == 3
        assert suite.checks[2].skipped
        assert suite.checks[3].skipped

    def test_activation_400_is_warning(self):
        client = MagicMock()
        client.list_workflows.return_value = []
        client.create_workflow.return_value = {"id": "wf-1"}
        client.activate_workflow.side_effect = N8nError("HTTP 400: needs trigger", status_code=400)

        runner = IntegrationSuite(client, FIXTURE_WORKFLOW)
        client.get_workflow.side_effect = lambda workflow_id: {"id": workflow_id, "name": runner.workflow_name}
        suite = runner.run()

        activate = suite.checks[3]
        assert activate.success and activate.warning
        assert suite.success
        client.delete_workflow.assert_called_once_with("wf-1")

    def test_activation_other_error_fails(self):
        client = MagicMock()
        client.create_workflow.return_value = {"id": "wf-1"}
        client.activate_workflow.side_effect = N8nError("HTTP 500: boom", status_code=500)

        suite = IntegrationSuite(client, FIXTURE_WORKFLOW).run()

        assert not suite.checks[3].success

    def test_cleanup_failure_does_not_fail_suite(self):
        client = MagicMock()
        client.create_workflow.return_value = {"id": "wf-1"}
        client.activate_workflow.return_value = {"active": True}
        client.delete_workflow.side_effect = N8nError("HTTP 500: boom", status_code=500)

        runner = IntegrationSuite(client, FIXTURE_WORKFLOW)
        client.get_workflow.side_effect = lambda workflow_id: {"name": runner.workflow_name}
        suite = runner.run()

        assert suite.success
        assert runner.cleanup_error == "HTTP 500: boom"

    def test_cleanup_runs_after_unexpected_error(self):
        client = MagicMock()
        client.create_workflow.return_value = {"id": "wf-1"}
        client.get_workflow.side_effect = RuntimeError("unexpected")

        with pytest.raises(RuntimeError):
            IntegrationSuite(client, FIXTURE_WORKFLOW).run()
        client.delete_workflow.assert_called_once_with("wf-1")

    def test_deploy_strips_id_and_renames(self):
        client = MagicMock()
        client.create_workflow.return_value = {"id": "wf-1"}
        runner = IntegrationSuite(client, FIXTURE_WORKFLOW)
        runner.deploy()

        payload = client.create_workflow.call_args.args[0]
        assert "id" not in payload
        assert payload["name"] == runner.workflow_name
        assert payload["nodes"]
