"""In-memory workflow storage backing the mock API."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

SEED_WORKFLOW_ID = "test-workflow-1"
SEED_WORKFLOW_NAME = "Test Workflow"


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class WorkflowStore:
    """Dict of workflow documents keyed by id.

    New workflows get ids ``workflow-1``, ``workflow-2``, ... in creation order.
    Nothing is persisted.
    """

    def __init__(self, seed: bool = True):
        self._workflows: dict[str, dict[str, Any]] = {}
        self._next_id = 1
        if seed:
            self.seed()

    def seed(self) -> None:
        now = _timestamp()
        self._workflows[SEED_WORKFLOW_ID] = {
            "id": SEED_WORKFLOW_ID,
            "name": SEED_WORKFLOW_NAME,
            "nodes": [],
            "connections": {},
            "active": False,
            "createdAt": now,
            "updatedAt": now,
        }

    def __len__(self) -> int:
        return len(self._workflows)

    def __contains__(self, workflow_id: object) -> bool:
        return workflow_id in self._workflows

    def list(self) -> list[dict[str, Any]]:
        return list(self._workflows.values())

    def get(self, workflow_id: str) -> dict[str, Any] | None:
        return self._workflows.get(workflow_id)

    def create(self, document: dict[str, Any]) -> dict[str, Any]:
        """Store a new workflow under a fresh id; any id in the body is replaced."""
        workflow_id = f"workflow-{self._next_id}"
        self._next_id += 1
        now = _timestamp()
        created = {**document, "id": workflow_id, "createdAt": now, "updatedAt": now}
        self._workflows[workflow_id] = created
        return created

    def update(self, workflow_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
        """Merge changes over the stored workflow, keeping its id."""
        existing = self._workflows.get(workflow_id)
        if existing is None:
            return None
        updated = {**existing, **changes, "id": workflow_id, "updatedAt": _timestamp()}
        self._workflows[workflow_id] = updated
        return updated

    def delete(self, workflow_id: str) -> bool:
        return self._workflows.pop(workflow_id, None) is not None

    def reset(self, seed: bool = True) -> None:
        self._workflows.clear()
        self._next_id = 1
        if seed:
            self.seed()
