# rich-based run report
# src/monitoring/report.py
"""
Human-readable rendering of a TestSummary.

Two views:
- print_concise_summary: one line per test plus a totals line.
- print_test_summary: results table, then one panel per failure with
  tick, position, expected and actual block.

Both take an optional rich Console so callers (and tests) can capture
output with Console(record=True) or Console(file=StringIO()).
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from spec.results import TestResult, TestSummary


def _status(result: TestResult) -> str:
    return "[bold green]PASS[/bold green]" if result.success else "[bold red]FAIL[/bold red]"


def _totals_line(summary: TestSummary) -> str:
    colour = "green" if summary.all_passed else "red"
    return (
        f"[bold {colour}]{summary.passed_tests}/{summary.total_tests} passed[/bold {colour}]"
        f", {summary.failed_tests} failed"
        f" ({summary.total_duration_s:.3f}s)"
    )


def _failure_reason(result: TestResult) -> str:
    if result.error:
        return escape(f"error: {result.error}")
    failures = result.failures
    if failures:
        return escape(failures[0].message or "assertion failed")
    return ""


# ============================================================
# Concise view
# ============================================================

def print_concise_summary(summary: TestSummary, console: Optional[Console] = None) -> None:
    console = console or Console()

    for result in summary.results:
        line = f"{_status(result)} {escape(result.name)}"
        if not result.success:
            line += f" [dim]- {_failure_reason(result)}[/dim]"
        console.print(line, highlight=False)

    console.print(_totals_line(summary), highlight=False)


# ============================================================
# Detailed view
# ============================================================

def _results_table(summary: TestSummary) -> Table:
    table = Table(show_header=True, header_style="bold magenta", title="Test Results")
    table.add_column("Test", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Ticks", justify="right")
    table.add_column("Assertions", justify="right")
    table.add_column("Time (s)", justify="right")

    for result in summary.results:
        table.add_row(
            escape(result.name),
            _status(result),
            str(result.total_ticks),
            str(len(result.assertions)),
            f"{result.duration_s:.3f}",
        )
    return table


def _failure_panel(result: TestResult) -> Panel:
    table = Table.grid(padding=(0, 1))
    table.add_column(justify="right", style="bold")
    table.add_column(justify="left")

    if result.error:
        table.add_row("Error:", escape(result.error))
    for failure in result.failures:
        table.add_row("Tick:", str(failure.tick))
        table.add_row("Position:", escape(str(list(failure.position or ()))))
        table.add_row("Expected:", f"[green]{escape(failure.expected or '')}[/green]")
        table.add_row("Actual:", f"[red]{escape(failure.actual or '')}[/red]")

    return Panel(table, title=escape(result.name), border_style="red")


def print_test_summary(
    summary: TestSummary,
    max_failures: int = 30,
    console: Optional[Console] = None,
) -> None:
    console = console or Console()

    console.print(_results_table(summary))

    failed = summary.failed_results()
    for result in failed[:max_failures]:
        console.print(_failure_panel(result))
    if len(failed) > max_failures:
        console.print(f"[dim]... and {len(failed) - max_failures} more failure(s)[/dim]")

    console.print(_totals_line(summary), highlight=False)
