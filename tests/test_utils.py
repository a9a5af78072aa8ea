"""Tests for slug and file helpers."""

import json
import re

import pytest

from flowctl.core.exceptions import DocumentError
from flowctl.core.utils import (
    find_workflow_files,
    mask_secret,
    merge_dicts,
    read_json_file,
    slugify,
    truncate_string,
    workflow_filename,
    write_json_file,
)


class TestSlugify:
    """Tests for slugify."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Order Sync", "order-sync"),
            ("Test Workflow", "test-workflow"),
            ("  Leading and trailing  ", "leading-and-trailing"),
            ("Sync: Orders -> CRM (v2)", "sync-orders-crm-v2"),
            ("already-kebab", "already-kebab"),
            ("Café Über", "caf-ber"),
            ("multiple---hyphens", "multiple-hyphens"),
        ],
    )
    def test_slugs(self, name, expected):
        assert slugify(name) == expected

    @pytest.mark.parametrize("name", ["", "!!!", "---", None, 42])
    def test_unusable_names(self, name):
        assert slugify(name) == "unnamed-workflow"

    @pytest.mark.parametrize("name", ["Order Sync", "Sync: Orders -> CRM", "ÄÖÜ 2024", "!!!"])
    def test_idempotent_and_well_formed(self, name):
        slug = slugify(name)
        assert slugify(slug) == slug
        assert re.fullmatch(r"[a-z0-9]+(-[a-z0-9]+)*", slug)

    def test_workflow_filename(self):
        assert workflow_filename("Test Workflow") == "test-workflow.json"


class TestWorkflowFiles:
    """Tests for finding, reading and writing workflow files."""

    def test_find_sorted_json_only(self, tmp_path):
        (tmp_path / "b.json").write_text("{}")
        (tmp_path / "a.json").write_text("{}")
        (tmp_path / "notes.txt").write_text("")
        assert [p.name for p in find_workflow_files(tmp_path)] == ["a.json", "b.json"]

    def test_find_missing_directory(self, tmp_path):
        assert find_workflow_files(tmp_path / "missing") == []

    def test_read_json_file(self, tmp_path):
        path = tmp_path / "wf.json"
        path.write_text('{"name": "x"}')
        content, data = read_json_file(path)
        assert content == '{"name": "x"}'
        assert data == {"name": "x"}

    def test_read_invalid_json(self, tmp_path):
        path = tmp_path / "wf.json"
        path.write_text("{")
        with pytest.raises(DocumentError) as exc:
            read_json_file(path)
        assert exc.value.path == str(path)
        assert exc.value.message.startswith("Invalid JSON syntax")

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(DocumentError, match="Cannot read file"):
            read_json_file(tmp_path / "missing.json")

    def test_write_json_file(self, tmp_path):
        path = write_json_file(tmp_path / "out" / "wf.json", {"name": "Café", "nodes": []})
        text = path.read_text(encoding="utf-8")
        assert text.endswith("\n")
        assert "Café" in text
        assert '\n  "nodes": []' in text
        assert json.loads(text) == {"name": "Café", "nodes": []}


class TestHelpers:
    """Tests for small helpers."""

    def test_mask_secret(self):
        assert mask_secret("n8n_api_0123456789") == "n8n_api_..."
        assert mask_secret(None) == "-"
        assert mask_secret("") == "-"

    def test_merge_dicts(self):
        base = {"global": {"workflows_dir": "workflows", "dry_run": False}}
        override = {"global": {"dry_run": True}}
        assert merge_dicts(base, override) == {"global": {"workflows_dir": "workflows", "dry_run": True}}
        assert base["global"]["dry_run"] is False

    def test_truncate_string(self):
        assert truncate_string("short") == "short"
        assert truncate_string("a" * 60, 10) == "aaaaaaa..."
