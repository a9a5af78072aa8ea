"""Common utilities for flowctl."""

import json
import re
from pathlib import Path
from typing import Any

from flowctl.core.exceptions import DocumentError

UNNAMED_WORKFLOW = "unnamed-workflow"

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def slugify(name: str | None) -> str:
    """Derive a filesystem-safe, kebab-case slug from a workflow name.

    Lowercases the name, collapses every run of characters outside
    ``[a-z0-9]`` into a single hyphen and trims hyphens from both ends.

    Args:
        name: Workflow display name

    Returns:
        Slug, or ``unnamed-workflow`` when nothing usable remains
    """
    if not isinstance(name, str):
        return UNNAMED_WORKFLOW
    slug = _NON_SLUG_CHARS.sub("-", name.lower()).strip("-")
    return slug or UNNAMED_WORKFLOW


def workflow_filename(name: str | None) -> str:
    """Get the export filename for a workflow name."""
    return f"{slugify(name)}.json"


def find_workflow_files(directory: str | Path) -> list[Path]:
    """List workflow JSON files in a directory, sorted by name.

    Args:
        directory: Directory to scan (not recursive)

    Returns:
        Sorted list of paths; empty if the directory does not exist
    """
    root = Path(directory)
    if not root.is_dir():
        return []
    return sorted(p for p in root.glob("*.json") if p.is_file())


def read_json_file(path: str | Path) -> tuple[str, Any]:
    """Read and parse a JSON file.

    Args:
        path: File path

    Returns:
        Tuple of (raw text, parsed value)

    Raises:
        DocumentError: If the file cannot be read or is not valid JSON
    """
    file_path = Path(path)
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentError(f"Cannot read file: {e.strerror or e}", path=str(path))

    try:
        return content, json.loads(content)
    except json.JSONDecodeError as e:
        raise DocumentError(f"Invalid JSON syntax: {e}", path=str(path))


def write_json_file(path: str | Path, data: Any) -> Path:
    """Write data as pretty-printed JSON, replacing any existing file."""
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(
        json.dumps(data, indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
    return file_path


def mask_secret(value: str | None, visible: int = 8) -> str:
    """Mask a secret for display, keeping a short prefix."""
    if not value:
        return "-"
    return f"{value[:visible]}..."


def merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def truncate_string(s: str, max_length: int = 50, suffix: str = "...") -> str:
    """Truncate a string to a maximum length."""
    if len(s) <= max_length:
        return s
    return s[: max_length - len(suffix)] + suffix
