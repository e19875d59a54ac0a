"""Rich console output helpers."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..models import Release

# Shared console instance
console = Console()
error_console = Console(stderr=True)


def print_error(message: str) -> None:
    """Print an error message."""
    error_console.print(f"[red]Error:[/red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[dim]{message}[/dim]")


def create_table(title: str, columns: list[tuple[str, str]]) -> Table:
    """Create a styled table.

    Args:
        title: Table title
        columns: List of (name, style) tuples
    """
    table = Table(title=title, show_header=True, header_style="bold")
    for name, style in columns:
        table.add_column(name, style=style)
    return table


def print_rulesets_table(rulesets: list[dict], title: str = "Rulesets") -> None:
    """Print a table of rulesets as returned by the API."""
    table = create_table(title, [("Name", "cyan"), ("Created", "dim")])
    for ruleset in rulesets:
        table.add_row(ruleset.get("name", "-"), ruleset.get("createTime", "-"))
    console.print(table)


def print_releases_table(releases: list[Release], title: str = "Releases") -> None:
    """Print a table of releases."""
    table = create_table(title, [("Release", "cyan"), ("Ruleset", ""), ("Updated", "dim")])
    for release in releases:
        updated = release.update_time.strftime("%Y-%m-%d %H:%M") if release.update_time else "-"
        table.add_row(release.short_name, release.ruleset_name, updated)
    console.print(table)


def print_test_issues(issues: list[dict]) -> None:
    """Print issues reported by a ruleset test run."""
    styles = {"ERROR": "red", "WARNING": "yellow"}
    for issue in issues:
        severity = issue.get("severity", "SEVERITY_UNSPECIFIED")
        position = issue.get("sourcePosition") or {}
        location = position.get("fileName", "?")
        if "line" in position:
            location += f":{position['line']}"
            if "column" in position:
                location += f":{position['column']}"
        style = styles.get(severity, "dim")
        console.print(f"[{style}]{severity}[/{style}] {escape(location)} {escape(issue.get('description', ''))}")
