"""Workflow document validation, export, deployment and test suites."""

from flowctl.workflows.schema import WorkflowSummary
from flowctl.workflows.validator import (
    ValidationResult,
    ValidationSummary,
    validate_document,
    validate_file,
    validate_paths,
)
from flowctl.workflows.exporter import ExportResult, WorkflowExporter
from flowctl.workflows.deployer import DeployPlan, DeployResult, WorkflowDeployer, plan_deployment
from flowctl.workflows.results import CheckResult, SuiteResult

__all__ = [
    "WorkflowSummary",
    "ValidationResult",
    "ValidationSummary",
    "validate_document",
    "validate_file",
    "validate_paths",
    "ExportResult",
    "WorkflowExporter",
    "DeployPlan",
    "DeployResult",
    "WorkflowDeployer",
    "plan_deployment",
    "CheckResult",
    "SuiteResult",
]
