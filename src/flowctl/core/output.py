"""Output formatting utilities using Rich."""

import json
from enum import Enum
from typing import Any, Iterable

import yaml
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table
from tabulate import tabulate


class OutputFormat(str, Enum):
    """Supported output formats."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"
    RAW = "raw"


# Marks for check and file outcomes, keyed by status
STATUS_MARKS = {
    "passed": "[green]✓[/green]",
    "failed": "[red]✗[/red]",
    "warning": "[yellow]![/yellow]",
    "skipped": "[dim]-[/dim]",
}

Records = list[dict[str, Any]] | dict[str, Any]


class OutputFormatter:
    """Handles output formatting for CLI commands.

    Status lines and tallies go to stdout, errors to stderr. With colour
    disabled, tables are rendered by tabulate so CI logs stay readable.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.TABLE,
        color: bool = True,
        quiet: bool = False,
    ):
        self.format = format
        self.color = color
        self.quiet = quiet
        self._console = Console(force_terminal=color, no_color=not color, highlight=color)
        self._error_console = Console(stderr=True, no_color=not color)

    @property
    def structured(self) -> bool:
        """Whether results should be emitted as a single JSON/YAML document."""
        return self.format in (OutputFormat.JSON, OutputFormat.YAML)

    def print(self, message: str, style: str | None = None) -> None:
        """Print a message to stdout."""
        if self.quiet:
            return
        self._console.print(message, style=style)

    def print_error(self, message: str, label: str = "Error") -> None:
        """Print an error message to stderr, even in quiet mode."""
        self._error_console.print(f"[red]{label}:[/red] {message}")

    def print_warning(self, message: str) -> None:
        self.print(f"[yellow]Warning:[/yellow] {message}")

    def print_info(self, message: str) -> None:
        self.print(f"[blue]ℹ[/blue] {message}")

    def print_status(self, status: str, message: str) -> None:
        """Print a line prefixed with the mark for a status."""
        self.print(f"{STATUS_MARKS.get(status, STATUS_MARKS['failed'])} {message}")

    def print_success(self, message: str) -> None:
        self.print_status("passed", message)

    def print_failure(self, message: str) -> None:
        self.print_status("failed", message)

    def print_issues(self, errors: Iterable[str] = (), warnings: Iterable[str] = ()) -> None:
        """Print indented error and warning lines under a status line."""
        for error in errors:
            self.print(f"    [red]{escape(error)}[/red]")
        for warning in warnings:
            self.print(f"    [yellow]{escape(warning)}[/yellow]")

    def print_tally(self, title: str, counts: dict[str, int], success: bool, message: str) -> None:
        """Print a summary table followed by the overall outcome."""
        self.print("")
        self.print_data(counts, title=title)
        if success:
            self.print_success(message)
        else:
            self.print_error(message)

    def print_data(
        self,
        data: Records,
        headers: list[str] | None = None,
        title: str | None = None,
    ) -> None:
        """Print data in the configured format."""
        if self.format == OutputFormat.JSON:
            self._print_json(data)
        elif self.format == OutputFormat.YAML:
            self._print_yaml(data)
        elif self.format == OutputFormat.RAW:
            self._print_raw(data)
        elif not self.color:
            self._print_plain_table(data, headers, title)
        else:
            self._print_table(data, headers, title)

    def _print_json(self, data: Any) -> None:
        json_str = json.dumps(data, indent=2, default=str)
        if self.color:
            self._console.print(Syntax(json_str, "json", theme="monokai"))
        else:
            print(json_str)

    def _print_yaml(self, data: Any) -> None:
        yaml_str = yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
        if self.color:
            self._console.print(Syntax(yaml_str, "yaml", theme="monokai"))
        else:
            print(yaml_str)

    def _print_raw(self, data: Any) -> None:
        if isinstance(data, list):
            for item in data:
                print(item)
        elif isinstance(data, dict):
            for key, value in data.items():
                print(f"{key}: {value}")
        else:
            print(data)

    def _print_plain_table(self, data: Records, headers: list[str] | None, title: str | None) -> None:
        if self.quiet:
            return
        columns, rows = _table_rows(data, headers)
        if not rows:
            print("No data to display")
            return
        if title:
            print(title)
        print(tabulate(rows, headers=columns, tablefmt="simple"))

    def _print_table(self, data: Records, headers: list[str] | None, title: str | None) -> None:
        if self.quiet:
            return
        columns, rows = _table_rows(data, headers)
        if not rows:
            self._console.print("[dim]No data to display[/dim]")
            return

        table = Table(title=title, show_header=True, header_style="bold cyan")
        for index, column in enumerate(columns):
            # Key-value records get a dimmed key column
            style = "dim" if isinstance(data, dict) and index == 0 else None
            table.add_column(column, style=style)
        for row in rows:
            table.add_row(*[escape(cell) for cell in row])
        self._console.print(table)

    def confirm(self, message: str, default: bool = False) -> bool:
        """Ask for confirmation."""
        if self.quiet:
            return default

        suffix = " [Y/n]" if default else " [y/N]"
        self._console.print(f"{message}{escape(suffix)}", end=" ")

        try:
            response = input().strip().lower()
            if not response:
                return default
            return response in ("y", "yes")
        except (EOFError, KeyboardInterrupt):
            return False


def _table_rows(data: Records, headers: list[str] | None) -> tuple[list[str], list[list[str]]]:
    """Flatten records into column names and string cells."""
    if isinstance(data, dict):
        return ["Field", "Value"], [[str(k), str(v)] for k, v in data.items()]
    if isinstance(data, list) and data:
        columns = headers or list(data[0].keys())
        return columns, [[str(row.get(c, "")) for c in columns] for row in data]
    return headers or [], []


def format_counts(passed: int, failed: int, warnings: int | None = None) -> str:
    """Format a pass/fail tally for one-line summaries."""
    parts = [f"{passed} passed", f"{failed} failed"]
    if warnings is not None:
        parts.append(f"{warnings} warning(s)")
    return ", ".join(parts)
