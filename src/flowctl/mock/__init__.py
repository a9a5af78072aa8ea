"""In-memory mock of the n8n workflows API."""

from flowctl.mock.server import create_app, run_server
from flowctl.mock.store import WorkflowStore

__all__ = ["create_app", "run_server", "WorkflowStore"]
