"""Test harness result types."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class CheckResult:
    """Result from a single harness check."""

    name: str
    success: bool
    message: str | None = None
    details: list[str] = field(default_factory=list)
    skipped: bool = False
    warning: bool = False

    @property
    def status(self) -> str:
        if self.skipped:
            return "skipped"
        if not self.success:
            return "failed"
        return "warning" if self.warning else "passed"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for output."""
        return {
            "name": self.name,
            "status": self.status,
            "message": self.message,
            "details": list(self.details),
        }


@dataclass
class SuiteResult:
    """Aggregated result from a harness suite."""

    name: str
    checks: list[CheckResult] = field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def failed_count(self) -> int:
        """Count of failed checks (skipped checks count when unsuccessful)."""
        return sum(1 for c in self.checks if not c.success)

    @property
    def passed_count(self) -> int:
        """Count of passed checks."""
        return sum(1 for c in self.checks if c.success and not c.skipped)

    @property
    def warning_count(self) -> int:
        return sum(1 for c in self.checks if c.warning)

    @property
    def success(self) -> bool:
        """Check if no check failed."""
        return self.failed_count == 0

    def add(self, check: CheckResult) -> CheckResult:
        self.checks.append(check)
        return check

    def extend(self, other: "SuiteResult") -> None:
        """Append another suite's checks, prefixing their names."""
        for check in other.checks:
            check.name = f"{other.name}: {check.name}"
            self.checks.append(check)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for output."""
        return {
            "name": self.name,
            "success": self.success,
            "passed": self.passed_count,
            "failed": self.failed_count,
            "warnings": self.warning_count,
            "checks": [c.to_dict() for c in self.checks],
        }
