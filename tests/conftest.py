"""Pytest fixtures for flowctl tests."""

import copy
import json
from pathlib import Path
from typing import Any, Callable, Generator

import pytest
from click.testing import CliRunner
from fastapi import FastAPI
from fastapi.testclient import TestClient

from flowctl.clients.n8n import N8nClient
from flowctl.config import FlowCtlConfig, InstanceConfig
from flowctl.core.context import FlowCtlContext
from flowctl.core.output import OutputFormat
from flowctl.mock.server import create_app

FIXTURES_DIR = Path(__file__).parent / "fixtures"
FIXTURE_WORKFLOW = FIXTURES_DIR / "test-workflow.json"

TEST_BASE_URL = "http://testserver"
TEST_API_KEY = "test-api-key-0123456789"

ENV_VARS = [
    "N8N_BASE_URL",
    "N8N_API_KEY",
    "N8N_TEST_BASE_URL",
    "N8N_TEST_API_KEY",
    "DRY_RUN",
    "FLOWCTL_WORKFLOWS_DIR",
    "FLOWCTL_INSTANCE",
    "FLOWCTL_CONFIG",
]

VALID_WORKFLOW: dict[str, Any] = {
    "name": "Order Sync",
    "nodes": [
        {
            "id": "node-1",
            "name": "Webhook",
            "type": "n8n-nodes-base.webhook",
            "position": [250, 300],
            "parameters": {"path": "order-sync", "httpMethod": "POST"},
        },
        {
            "id": "node-2",
            "name": "Save Order",
            "type": "n8n-nodes-base.httpRequest",
            "position": [470, 300],
            "parameters": {"url": "https://api.example.com/orders", "method": "POST"},
            "credentials": {"httpHeaderAuth": {"id": "7", "name": "Orders API"}},
        },
        {
            "id": "node-3",
            "name": "Error Trigger",
            "type": "n8n-nodes-base.errorTrigger",
            "position": [250, 520],
            "parameters": {},
        },
    ],
    "connections": {
        "Webhook": {"main": [[{"node": "Save Order", "type": "main", "index": 0}]]},
    },
    "active": False,
    "settings": {"executionOrder": "v1"},
}


@pytest.fixture(autouse=True)
def clean_env(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> Generator[None, None, None]:
    """Isolate each test from the caller's environment, dotenv and config files."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    # Keep rich from wrapping long temp paths in captured output
    monkeypatch.setenv("COLUMNS", "250")
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    yield


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI runner."""
    return CliRunner()


@pytest.fixture
def instance_config() -> InstanceConfig:
    """Instance pointing at the in-process mock server."""
    return InstanceConfig(base_url=TEST_BASE_URL, api_key=TEST_API_KEY)


@pytest.fixture
def mock_config(instance_config: InstanceConfig) -> FlowCtlConfig:
    """Create a configuration with default and test instances."""
    return FlowCtlConfig(
        instances={
            "default": instance_config,
            "test": instance_config.model_copy(),
        }
    )


@pytest.fixture
def mock_context(mock_config: FlowCtlConfig) -> FlowCtlContext:
    """Create a flowctl context."""
    return FlowCtlContext(
        config=mock_config,
        instance="default",
        output_format=OutputFormat.TABLE,
        verbose=0,
        quiet=False,
        dry_run=False,
        color=False,
    )


@pytest.fixture
def mock_app() -> FastAPI:
    """Create a seeded mock n8n API."""
    return create_app(seed=True)


@pytest.fixture
def api_client(mock_app: FastAPI) -> TestClient:
    """HTTP client bound to the mock API."""
    return TestClient(mock_app, base_url=TEST_BASE_URL)


@pytest.fixture
def n8n_client(instance_config: InstanceConfig, api_client: TestClient) -> N8nClient:
    """n8n client talking to the mock API in-process."""
    return N8nClient(instance_config, http_client=api_client)


@pytest.fixture
def cli_env(
    monkeypatch: pytest.MonkeyPatch,
    n8n_client: N8nClient,
) -> N8nClient:
    """Configure the CLI for the mock API and route its client there."""
    monkeypatch.setenv("N8N_BASE_URL", TEST_BASE_URL)
    monkeypatch.setenv("N8N_API_KEY", TEST_API_KEY)
    monkeypatch.setattr(FlowCtlContext, "client_for", lambda self, name: n8n_client)
    return n8n_client


@pytest.fixture
def valid_workflow() -> dict[str, Any]:
    """A workflow document that passes validation without warnings."""
    return copy.deepcopy(VALID_WORKFLOW)


@pytest.fixture
def write_workflow(tmp_path: Path) -> Callable[..., Path]:
    """Write a workflow document (or raw text) to a file and return its path."""
    directory = tmp_path / "workflows"
    directory.mkdir(exist_ok=True)

    def _write(content: Any, filename: str = "workflow.json") -> Path:
        path = directory / filename
        text = content if isinstance(content, str) else json.dumps(content, indent=2)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
