"""Tests for workflow import/deployment."""

import copy
from unittest.mock import MagicMock

import pytest

from flowctl.core.exceptions import N8nError
from flowctl.workflows.deployer import WorkflowDeployer, plan_deployment


class TestPlanDeployment:
    """Tests for plan_deployment."""

    def test_without_id_creates(self, valid_workflow):
        plan = plan_deployment(valid_workflow)
        assert plan.action == "create"
        assert plan.method == "POST"
        assert plan.path == "/api/v1/workflows"
        assert plan.payload == valid_workflow
        assert plan.workflow_id is None

    def test_with_id_updates_without_active(self, valid_workflow):
        valid_workflow["id"] = "wf-9"
        valid_workflow["active"] = True
        original = copy.deepcopy(valid_workflow)

        plan = plan_deployment(valid_workflow)

        assert plan.action == "update"
        assert plan.method == "PUT"
        assert plan.path == "/api/v1/workflows/wf-9"
        assert "active" not in plan.payload
        assert plan.payload["id"] == "wf-9"
        assert valid_workflow == original

    @pytest.mark.parametrize("active", [True, False, "yes", None])
    def test_update_payload_never_contains_active(self, valid_workflow, active):
        valid_workflow.update(id="wf-1", active=active)
        assert "active" not in plan_deployment(valid_workflow).payload


class TestWorkflowDeployer:
    """Tests for WorkflowDeployer against the mock API."""

    def test_create_then_update(self, n8n_client, valid_workflow, write_workflow):
        deployer = WorkflowDeployer(n8n_client)

        created = deployer.deploy([write_workflow(valid_workflow)])
        assert created.imported == 1
        item = created.items[0]
        assert item.action == "create"
        assert item.workflow_id == "workflow-1"

        valid_workflow["id"] = item.workflow_id
        valid_workflow["name"] = "Order Sync v2"
        valid_workflow["active"] = True
        updated = deployer.deploy([write_workflow(valid_workflow, "v2.json")])

        assert updated.imported == 1
        assert updated.items[0].action == "update"
        stored = n8n_client.get_workflow("workflow-1")
        assert stored["name"] == "Order Sync v2"
        assert stored["active"] is False

    def test_document_with_warnings_is_created(self, n8n_client, valid_workflow, write_workflow):
        valid_workflow["active"] = "yes"
        valid_workflow["nodes"][0]["position"] = ["left", "top"]

        result = WorkflowDeployer(n8n_client).deploy([write_workflow(valid_workflow)])

        assert result.imported == 1, result.items[0].error
        stored = n8n_client.get_workflow("workflow-1")
        assert stored["active"] == "yes"
        assert stored["nodes"][0]["position"] == ["left", "top"]

    def test_password_document_never_sent(self, valid_workflow, write_workflow):
        valid_workflow["nodes"][1]["parameters"]["password"] = "hunter2"
        client = MagicMock()

        result = WorkflowDeployer(client).deploy([write_workflow(valid_workflow)])

        assert result.failed == 1
        assert "hardcoded secret" in result.items[0].error
        client.create_workflow.assert_not_called()
        client.update_workflow.assert_not_called()

    def test_skip_validation_sends_anyway(self, write_workflow):
        client = MagicMock()
        client.create_workflow.return_value = {"id": "wf-1"}

        result = WorkflowDeployer(client, validate=False).deploy([write_workflow({"nodes": []})])

        assert result.imported == 1
        client.create_workflow.assert_called_once_with({"nodes": []})

    def test_missing_and_invalid_files(self, n8n_client, tmp_path, write_workflow, valid_workflow):
        paths = [
            tmp_path / "missing.json",
            write_workflow("{broken", "broken.json"),
            write_workflow(valid_workflow, "good.json"),
        ]

        result = WorkflowDeployer(n8n_client).deploy(paths)

        assert result.imported == 1
        assert result.failed == 2
        assert result.items[0].error.startswith("File not found")
        assert result.items[1].error.startswith("Invalid JSON syntax")
        assert not result.success

    def test_api_error_recorded(self, valid_workflow, write_workflow):
        client = MagicMock()
        client.update_workflow.side_effect = N8nError("HTTP 404: Workflow not found", status_code=404)
        valid_workflow["id"] = "gone"

        result = WorkflowDeployer(client).deploy([write_workflow(valid_workflow)])

        assert result.failed == 1
        assert result.items[0].error == "HTTP 404: Workflow not found"
        client.update_workflow.assert_called_once()

    def test_dry_run_counts_as_imported(self, valid_workflow, write_workflow):
        client = MagicMock()

        result = WorkflowDeployer(client, dry_run=True).deploy([write_workflow(valid_workflow)])

        assert result.imported == 1
        assert result.items[0].action == "create"
        client.create_workflow.assert_not_called()

    def test_deploy_document_in_memory(self, n8n_client, valid_workflow):
        item = WorkflowDeployer(n8n_client).deploy_document(valid_workflow, source="memory")
        assert item.success
        assert item.response["name"] == "Order Sync"
        assert item.path == "memory"
