"""Workflow list schema."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from flowctl.core.utils import truncate_string


class WorkflowSummary(BaseModel):
    """Summary record returned by the list endpoint."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    name: str = ""
    active: bool | None = None
    updated_at: str | None = Field(default=None, alias="updatedAt")
    nodes: list[dict[str, Any]] = Field(default_factory=list)

    def to_row(self) -> dict[str, Any]:
        """Convert to a display row."""
        return {
            "ID": self.id,
            "Name": truncate_string(self.name) if self.name else "(unnamed)",
            "Active": "-" if self.active is None else ("yes" if self.active else "no"),
            "Nodes": len(self.nodes),
            "Updated": self.updated_at or "-",
        }
