"""
This module provides Rich-based console output utilities for the shipline
CLI: status lines, tables and release plan/run reports.
"""

import json
from typing import Any, Callable, Dict, List, Optional

import click
from rich.console import Console
from rich.table import Table

from shipline.core.pipeline import PlanStatus, RunStatus

# Global console instance
console = Console()

PLAN_STYLES = {
    PlanStatus.READY: "green",
    PlanStatus.MISSING: "yellow",
    PlanStatus.DISABLED: "dim",
}

RUN_STYLES = {
    RunStatus.SUCCESS: "green",
    RunStatus.FAILED: "red",
    RunStatus.SKIPPED: "yellow",
}


def print_success(message: str) -> None:
    """Print a success message in green."""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    """Print a warning message in yellow."""
    console.print(f"[yellow]![/yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message in blue."""
    console.print(f"[blue]ℹ[/blue] {message}")


def print_json(data: Any) -> None:
    """Print data as indented JSON, bypassing Rich so output stays machine readable."""
    click.echo(json.dumps(data, indent=2, default=str))


def print_table(
    title: str,
    columns: list,
    rows: list,
    show_header: bool = True,
) -> None:
    """
    Print a formatted table.

    Args:
        title: Table title
        columns: List of column names
        rows: List of row data (each row is a list of values)
        show_header: Whether to show column headers
    """
    table = Table(title=title, show_header=show_header)

    for col in columns:
        table.add_column(col)

    for row in rows:
        table.add_row(*[str(v) for v in row])

    console.print(table)


def _print_notes(warnings: List[str], hints: List[str]) -> None:
    for warning in warnings:
        print_warning(warning)
    for hint in hints:
        print_info(hint)


def print_release_plan(release_plan: Any) -> None:
    """
    Print a release plan as a table of steps with their status.

    Args:
        release_plan: ReleasePlan to render
    """
    state = "" if release_plan.enabled else " [dim](disabled)[/dim]"
    table = Table(title=f"Release plan: {release_plan.component_id}{state}")
    table.add_column("#", justify="right")
    table.add_column("Step")
    table.add_column("Type")
    table.add_column("Needs")
    table.add_column("Status")
    table.add_column("Missing")

    for idx, step in enumerate(release_plan.steps, start=1):
        style = PLAN_STYLES[step.status]
        table.add_row(
            str(idx),
            step.label or step.id,
            step.type,
            ", ".join(step.needs),
            f"[{style}]{step.status.value}[/{style}]",
            "; ".join(step.missing),
        )

    console.print(table)
    _print_notes(release_plan.warnings, release_plan.hints)


def print_release_run(release_run: Any) -> None:
    """
    Print a release run report: one row per step plus a summary line.

    Args:
        release_run: ReleaseRun to render
    """
    result = release_run.result
    table = Table(title=f"Release run: {release_run.component_id}")
    table.add_column("Step")
    table.add_column("Type")
    table.add_column("Status")
    table.add_column("Details")

    for step in result.steps:
        style = RUN_STYLES[step.status]
        details = step.error or "; ".join(step.missing + step.warnings)
        table.add_row(step.id, step.type, f"[{style}]{step.status.value}[/{style}]", details)

    console.print(table)
    _print_notes(result.warnings, [hint for step in result.steps for hint in step.hints])

    summary = f"{result.succeeded} succeeded, {result.failed} failed, {result.skipped} skipped"
    if result.overall == RunStatus.FAILED:
        print_error(f"Release failed ({summary})")
    else:
        print_success(f"Release succeeded ({summary})")


def step_progress(quiet: bool = False) -> Optional[Callable[[str, int, int, str], None]]:
    """
    Build a progress callback that prints one line per finished step.

    Returns:
        Callback for run_pipeline, or None when quiet
    """
    if quiet:
        return None

    def _callback(step_id: str, current: int, total: int, status: str) -> None:
        if status == "running":
            return
        style = RUN_STYLES.get(RunStatus(status), "white")
        console.print(f"[dim][{current}/{total}][/dim] {step_id}: [{style}]{status}[/{style}]")

    return _callback


def print_mapping(title: str, data: Dict[str, Any]) -> None:
    """Print a section header followed by key = value lines."""
    console.print(f"[bold blue]\\[{title}][/bold blue]")
    for key, value in data.items():
        console.print(f"  {key} = {value}")
    console.print()
