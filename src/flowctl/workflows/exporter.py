"""Export workflows from an n8n instance to local JSON files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable

from flowctl.core.exceptions import N8nError
from flowctl.core.logging import StructuredLogger
from flowctl.core.utils import workflow_filename, write_json_file

if TYPE_CHECKING:
    from flowctl.clients.n8n import N8nClient

logger = StructuredLogger(__name__)


@dataclass
class ExportFailure:
    workflow_id: str
    error: str


@dataclass
class ExportResult:
    """Tally of an export run."""

    files: list[Path] = field(default_factory=list)
    failures: list[ExportFailure] = field(default_factory=list)

    @property
    def exported(self) -> int:
        return len(self.files)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def success(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict[str, Any]:
        return {
            "exported": self.exported,
            "failed": self.failed,
            "files": [str(f) for f in self.files],
            "failures": [{"id": f.workflow_id, "error": f.error} for f in self.failures],
        }


class WorkflowExporter:
    """Fetches workflow documents and writes them as ``<slug>.json`` files."""

    def __init__(
        self,
        client: N8nClient,
        output_dir: str | Path,
        dry_run: bool = False,
    ):
        self.client = client
        self.output_dir = Path(output_dir)
        self.dry_run = dry_run

    def export(self, ids: Iterable[str] | None = None) -> ExportResult:
        """Export the given workflows, or every workflow when ids is None.

        Raises:
            N8nError: If listing workflows fails
        """
        result = ExportResult()

        if self.dry_run:
            target = ", ".join(ids) if ids else "all workflows"
            logger.info("Dry run: would export", workflows=target, output_dir=self.output_dir)
            return result

        if ids is None:
            ids = self._list_ids()
        ids = list(ids)

        if not ids:
            logger.info("No workflows to export")
            return result

        self.output_dir.mkdir(parents=True, exist_ok=True)
        for workflow_id in ids:
            self._export_one(workflow_id, result)

        logger.info("Export finished", exported=result.exported, failed=result.failed)
        return result

    def _list_ids(self) -> list[str]:
        workflows = self.client.list_workflows()
        ids = [str(w["id"]) for w in workflows if isinstance(w, dict) and w.get("id") is not None]
        logger.debug("Listed workflows", count=len(ids))
        return ids

    def _export_one(self, workflow_id: str, result: ExportResult) -> None:
        try:
            document = self.client.get_workflow(workflow_id)
        except N8nError as e:
            logger.warning("Failed to export workflow", id=workflow_id, error=e.message)
            result.failures.append(ExportFailure(workflow_id, e.message))
            return

        if not isinstance(document, dict):
            result.failures.append(ExportFailure(workflow_id, "Unexpected response: not an object"))
            return

        path = self.output_dir / workflow_filename(document.get("name"))
        try:
            write_json_file(path, document)
        except OSError as e:
            result.failures.append(ExportFailure(workflow_id, f"Cannot write {path}: {e}"))
            return

        logger.debug("Exported workflow", id=workflow_id, path=path)
        result.files.append(path)
