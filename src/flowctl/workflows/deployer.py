"""Create or update workflows on an n8n instance from local files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable

from flowctl.clients.n8n import WORKFLOWS_PATH
from flowctl.config import ValidationConfig
from flowctl.core.exceptions import DocumentError, N8nError
from flowctl.core.logging import StructuredLogger
from flowctl.core.utils import read_json_file
from flowctl.workflows.validator import validate_document

if TYPE_CHECKING:
    from flowctl.clients.n8n import N8nClient

logger = StructuredLogger(__name__)

CREATE = "create"
UPDATE = "update"


@dataclass
class DeployPlan:
    """The single API call a document maps to."""

    action: str
    method: str
    path: str
    payload: dict[str, Any]
    workflow_id: str | None = None


@dataclass
class DeployItem:
    """Outcome for one deployed document."""

    path: str
    success: bool
    action: str | None = None
    workflow_id: str | None = None
    name: str | None = None
    error: str | None = None
    response: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "name": self.name,
            "action": self.action,
            "id": self.workflow_id,
            "success": self.success,
            "error": self.error,
        }


@dataclass
class DeployResult:
    """Tally of a deployment run."""

    items: list[DeployItem] = field(default_factory=list)

    @property
    def imported(self) -> int:
        return sum(1 for i in self.items if i.success)

    @property
    def failed(self) -> int:
        return sum(1 for i in self.items if not i.success)

    @property
    def success(self) -> bool:
        return self.failed == 0


def plan_deployment(document: dict[str, Any]) -> DeployPlan:
    """Decide between create and update for a workflow document.

    A document with an ``id`` updates that workflow; the payload drops
    ``active`` so a deploy never toggles activation. Without an ``id`` the
    full document is posted. The input is not modified.
    """
    workflow_id = document.get("id")
    if workflow_id:
        payload = {k: v for k, v in document.items() if k != "active"}
        return DeployPlan(
            action=UPDATE,
            method="PUT",
            path=f"{WORKFLOWS_PATH}/{workflow_id}",
            payload=payload,
            workflow_id=str(workflow_id),
        )
    return DeployPlan(action=CREATE, method="POST", path=WORKFLOWS_PATH, payload=dict(document))


class WorkflowDeployer:
    """Validates and sends workflow documents, one call per document."""

    def __init__(
        self,
        client: N8nClient | None,
        dry_run: bool = False,
        validate: bool = True,
        rules: ValidationConfig | None = None,
    ):
        self.client = client
        self.dry_run = dry_run
        self.validate = validate
        self.rules = rules

    def deploy(self, paths: Iterable[str | Path]) -> DeployResult:
        """Deploy each file, recording a failure per file rather than stopping."""
        result = DeployResult()
        for path in paths:
            result.items.append(self._deploy_path(Path(path)))
        logger.info("Deploy finished", imported=result.imported, failed=result.failed)
        return result

    def _deploy_path(self, path: Path) -> DeployItem:
        if not path.is_file():
            return DeployItem(path=str(path), success=False, error=f"File not found: {path}")

        try:
            content, document = read_json_file(path)
        except DocumentError as e:
            return DeployItem(path=str(path), success=False, error=e.message)

        return self.deploy_document(document, source=str(path), content=content)

    def deploy_document(
        self,
        document: Any,
        source: str = "<document>",
        content: str | None = None,
    ) -> DeployItem:
        """Validate and send one in-memory document."""
        log = logger.bind(source=source)

        if not isinstance(document, dict):
            return DeployItem(path=source, success=False, error="Workflow document must be a JSON object")

        name = document.get("name") if isinstance(document.get("name"), str) else None

        if self.validate:
            validation = validate_document(document, content=content, source=source, rules=self.rules)
            if not validation.passed:
                log.warning("Validation failed, not deploying", errors=len(validation.errors))
                return DeployItem(
                    path=source,
                    success=False,
                    name=name,
                    error="Validation failed: " + "; ".join(validation.errors),
                )

        plan = plan_deployment(document)
        item = DeployItem(
            path=source,
            success=False,
            action=plan.action,
            workflow_id=plan.workflow_id,
            name=name,
        )

        if self.dry_run:
            log.info("Dry run: would send", method=plan.method, path=plan.path)
            item.success = True
            return item

        if self.client is None:
            raise N8nError("No n8n client configured for deployment")

        try:
            if plan.action == UPDATE:
                response = self.client.update_workflow(plan.workflow_id, plan.payload)
            else:
                response = self.client.create_workflow(plan.payload)
        except N8nError as e:
            log.warning("Deploy failed", action=plan.action, error=e.message)
            item.error = e.message
            return item

        item.success = True
        if isinstance(response, dict):
            item.response = response
            if response.get("id") is not None:
                item.workflow_id = str(response["id"])
        log.debug("Deployed workflow", action=plan.action, id=item.workflow_id)
        return item
