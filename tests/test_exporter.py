"""Tests for workflow export."""

import json
from unittest.mock import MagicMock

import pytest

from flowctl.core.exceptions import N8nError
from flowctl.workflows.exporter import WorkflowExporter


class TestWorkflowExporter:
    """Tests for WorkflowExporter against the mock API."""

    def test_export_all_from_seeded_mock(self, n8n_client, tmp_path):
        result = WorkflowExporter(n8n_client, tmp_path / "out").export()

        assert result.exported == 1
        assert result.failed == 0
        path = tmp_path / "out" / "test-workflow.json"
        assert result.files == [path]

        text = path.read_text(encoding="utf-8")
        assert text.endswith("\n")
        assert json.loads(text)["id"] == "test-workflow-1"

    def test_export_selected_ids(self, n8n_client, valid_workflow, tmp_path):
        created = n8n_client.create_workflow(valid_workflow)

        result = WorkflowExporter(n8n_client, tmp_path).export([created["id"]])

        assert [p.name for p in result.files] == ["order-sync.json"]

    def test_missing_id_recorded_and_others_continue(self, n8n_client, tmp_path):
        result = WorkflowExporter(n8n_client, tmp_path).export(["missing", "test-workflow-1"])

        assert result.exported == 1
        assert result.failed == 1
        assert result.failures[0].workflow_id == "missing"
        assert "404" in result.failures[0].error
        assert not result.success

    def test_overwrites_existing_file(self, n8n_client, tmp_path):
        (tmp_path / "test-workflow.json").write_text("stale")
        WorkflowExporter(n8n_client, tmp_path).export()
        assert json.loads((tmp_path / "test-workflow.json").read_text())["name"] == "Test Workflow"

    def test_unnamed_workflow(self, tmp_path):
        client = MagicMock()
        client.get_workflow.return_value = {"id": "x", "name": "!!!"}
        result = WorkflowExporter(client, tmp_path).export(["x"])
        assert result.files == [tmp_path / "unnamed-workflow.json"]

    def test_list_failure_raises(self, tmp_path):
        client = MagicMock()
        client.list_workflows.side_effect = N8nError("HTTP 500: boom", status_code=500)
        with pytest.raises(N8nError):
            WorkflowExporter(client, tmp_path).export()

    def test_dry_run_makes_no_calls(self, tmp_path):
        client = MagicMock()
        result = WorkflowExporter(client, tmp_path / "out", dry_run=True).export()

        assert result.exported == 0
        assert result.failed == 0
        client.list_workflows.assert_not_called()
        client.get_workflow.assert_not_called()
        assert not (tmp_path / "out").exists()
