"""Workflow document validation.

Every check is an independent pure function of the parsed document that
returns ``(errors, warnings)``. A document passes when no check reports an
error; warnings are tallied but never fail it.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable

from flowctl.config import ValidationConfig
from flowctl.core.exceptions import DocumentError
from flowctl.core.logging import StructuredLogger
from flowctl.core.utils import read_json_file

logger = StructuredLogger(__name__)

REQUIRED_NODE_FIELDS = ("id", "name", "type", "position")

# Quotes may be backslash-escaped when the secret sits inside a string value
_Q = r"""\\?["']"""

SECRET_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("api key", re.compile(rf"api[_-]?key{_Q}?\s*[:=]\s*{_Q}[a-zA-Z0-9]{{20,}}", re.IGNORECASE)),
    ("password", re.compile(rf"password{_Q}?\s*[:=]\s*{_Q}[^'\"\\]+", re.IGNORECASE)),
    ("secret", re.compile(rf"secret{_Q}?\s*[:=]\s*{_Q}[^'\"\\]+", re.IGNORECASE)),
    ("token", re.compile(rf"token{_Q}?\s*[:=]\s*{_Q}[a-zA-Z0-9_-]{{20,}}", re.IGNORECASE)),
    ("bearer token", re.compile(r"Bearer [a-zA-Z0-9_-]{20,}")),
]

Issues = tuple[list[str], list[str]]


@dataclass
class ValidationResult:
    """Outcome of validating one workflow document."""

    source: str
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    name: str | None = None
    node_count: int | None = None

    @property
    def passed(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "name": self.name,
            "passed": self.passed,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


@dataclass
class ValidationSummary:
    """Aggregated results of validating several documents."""

    results: list[ValidationResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.passed)

    @property
    def warnings(self) -> int:
        return sum(len(r.warnings) for r in self.results if r.passed)

    @property
    def success(self) -> bool:
        return self.failed == 0

    def add(self, result: ValidationResult) -> None:
        self.results.append(result)


def _nodes(document: dict[str, Any]) -> list[Any] | None:
    nodes = document.get("nodes")
    return nodes if isinstance(nodes, list) else None


def _node_label(node: dict[str, Any], index: int) -> str:
    name = node.get("name")
    return f'"{name}"' if isinstance(name, str) and name else str(index)


def check_required_fields(document: dict[str, Any], rules: ValidationConfig) -> Issues:
    """Check top-level name, nodes, connections and active."""
    errors: list[str] = []
    warnings: list[str] = []

    name = document.get("name")
    if not isinstance(name, str) or not name.strip():
        errors.append("Missing or invalid required field: name (non-empty string)")

    if not isinstance(document.get("nodes"), list):
        errors.append("Missing or invalid required field: nodes (array)")

    if "connections" not in document or document["connections"] is None:
        warnings.append("Missing connections field (may be intentional for single-node workflows)")
    elif not isinstance(document["connections"], dict):
        errors.append("Invalid connections field: must be an object")

    if "active" in document and not isinstance(document["active"], bool):
        warnings.append('Field "active" should be a boolean')

    return errors, warnings


def check_node_shape(document: dict[str, Any], rules: ValidationConfig) -> Issues:
    """Check that every node carries id, name, type and an [x, y] position."""
    errors: list[str] = []
    nodes = _nodes(document)
    if nodes is None:
        return errors, []

    for index, node in enumerate(nodes):
        if not isinstance(node, dict):
            errors.append(f"Node {index} is not an object")
            continue

        for field_name in REQUIRED_NODE_FIELDS:
            if field_name not in node:
                errors.append(f"Node {index} missing required field: {field_name}")

        position = node.get("position")
        if position is not None and not (isinstance(position, list) and len(position) == 2):
            errors.append(
                f"Node {_node_label(node, index)} has invalid position (should be array [x, y])"
            )

    return errors, []


def check_unique_node_ids(document: dict[str, Any], rules: ValidationConfig) -> Issues:
    """Check that node ids are unique within the document."""
    nodes = _nodes(document)
    if nodes is None:
        return [], []

    seen: set[str] = set()
    duplicates: list[str] = []
    for node in nodes:
        if not isinstance(node, dict) or node.get("id") is None:
            continue
        node_id = str(node["id"])
        if node_id in seen and node_id not in duplicates:
            duplicates.append(node_id)
        seen.add(node_id)

    return [f"Duplicate node ID found: {node_id}" for node_id in duplicates], []


def find_secret(content: str) -> str | None:
    """Return the kind of the first secret-shaped substring in content, if any."""
    for kind, pattern in SECRET_PATTERNS:
        if pattern.search(content):
            return kind
    return None


def check_secrets(
    document: dict[str, Any],
    rules: ValidationConfig,
    content: str | None = None,
) -> Issues:
    """Scan for hardcoded secrets and literal credential values."""
    errors: list[str] = []
    warnings: list[str] = []

    text = content if content is not None else json.dumps(document, indent=2, ensure_ascii=False)
    kind = find_secret(text)
    if kind:
        errors.append(
            f"Possible hardcoded secret detected ({kind}) - "
            "use environment variables or n8n credentials"
        )

    for index, node in enumerate(_nodes(document) or []):
        if not isinstance(node, dict) or not isinstance(node.get("credentials"), dict):
            continue
        for cred_type, cred_value in node["credentials"].items():
            if isinstance(cred_value, str) and not cred_value.startswith(rules.expression_marker):
                warnings.append(
                    f"Node {_node_label(node, index)}: credential \"{cred_type}\" "
                    "may have hardcoded value"
                )

    return errors, warnings


def check_webhook_paths(document: dict[str, Any], rules: ValidationConfig) -> Issues:
    """Check webhook paths follow the lowercase kebab-case convention."""
    warnings: list[str] = []
    pattern = re.compile(rules.webhook_path_pattern)

    for node in _nodes(document) or []:
        if not isinstance(node, dict) or node.get("type") != rules.webhook_node_type:
            continue
        parameters = node.get("parameters")
        path = parameters.get("path") if isinstance(parameters, dict) else None
        if isinstance(path, str) and path and not pattern.fullmatch(path):
            warnings.append(f"Webhook path may not follow kebab-case convention: {path}")

    return [], warnings


def check_error_trigger(document: dict[str, Any], rules: ValidationConfig) -> Issues:
    """Recommend an Error Trigger node."""
    nodes = _nodes(document)
    if nodes is None:
        return [], []

    has_trigger = any(
        isinstance(node, dict) and node.get("type") == rules.error_trigger_node_type
        for node in nodes
    )
    if has_trigger:
        return [], []
    return [], ["No Error Trigger node found (recommended for production)"]


CHECKS: list[Callable[[dict[str, Any], ValidationConfig], Issues]] = [
    check_required_fields,
    check_node_shape,
    check_unique_node_ids,
    check_webhook_paths,
    check_error_trigger,
]


def validate_document(
    document: Any,
    content: str | None = None,
    source: str = "<document>",
    rules: ValidationConfig | None = None,
) -> ValidationResult:
    """Run every check against a parsed workflow document.

    Args:
        document: Parsed JSON value
        content: Original text, scanned for secrets instead of a re-serialization
        source: Label for reporting (usually the file path)
        rules: Validation rules; defaults apply when omitted

    Returns:
        ValidationResult with all errors and warnings
    """
    rules = rules or ValidationConfig()
    result = ValidationResult(source=source)

    if not isinstance(document, dict):
        result.errors.append("Workflow document must be a JSON object")
        return result

    name = document.get("name")
    result.name = name if isinstance(name, str) else None
    nodes = _nodes(document)
    result.node_count = len(nodes) if nodes is not None else None

    for check in CHECKS:
        errors, warnings = check(document, rules)
        result.errors.extend(errors)
        result.warnings.extend(warnings)

    errors, warnings = check_secrets(document, rules, content)
    result.errors.extend(errors)
    result.warnings.extend(warnings)

    logger.debug(
        "Validated workflow",
        source=source,
        errors=len(result.errors),
        warnings=len(result.warnings),
    )
    return result


def validate_text(
    content: str,
    source: str = "<document>",
    rules: ValidationConfig | None = None,
) -> ValidationResult:
    """Parse and validate workflow JSON text."""
    try:
        document = json.loads(content)
    except json.JSONDecodeError as e:
        return ValidationResult(source=source, errors=[f"Invalid JSON syntax: {e}"])

    return validate_document(document, content=content, source=source, rules=rules)


def validate_file(path: str | Path, rules: ValidationConfig | None = None) -> ValidationResult:
    """Read, parse and validate a workflow file.

    An unreadable or unparseable file produces a single terminal error.
    """
    try:
        content, document = read_json_file(path)
    except DocumentError as e:
        return ValidationResult(source=str(path), errors=[e.message])

    return validate_document(document, content=content, source=str(path), rules=rules)


def validate_paths(
    paths: Iterable[str | Path],
    rules: ValidationConfig | None = None,
) -> ValidationSummary:
    """Validate several files and aggregate the results."""
    summary = ValidationSummary()
    for path in paths:
        if not Path(path).is_file():
            summary.add(ValidationResult(source=str(path), errors=[f"File not found: {path}"]))
            continue
        summary.add(validate_file(path, rules))
    return summary
