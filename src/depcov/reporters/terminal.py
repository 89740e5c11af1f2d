"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from depcov.models.usage import CoverageUsage, UsageCounter
    from depcov.orchestrator import DependencySummary, ReportResult

console = Console()

_HIGH_COVERAGE = 80
_MEDIUM_COVERAGE = 50


def _coverage_color(percentage: int) -> str:
    """Return a Rich color name for a covered percentage."""
    if percentage >= _HIGH_COVERAGE:
        return "green"
    if percentage >= _MEDIUM_COVERAGE:
        return "yellow"
    return "red"


def format_counter(counter: UsageCounter, *, bold: bool = False) -> str:
    """Render a counter as a colored percentage (``n/a`` when empty)."""
    pct = counter.covered_percentage
    if pct is None:
        return "[dim]n/a[/dim]"
    style = f"bold {_coverage_color(pct)}" if bold else _coverage_color(pct)
    return f"[{style}]{pct}%[/{style}] [dim]({counter.covered}/{counter.total})[/dim]"


class CLIReporter:
    """Rich terminal output for dependency coverage runs."""

    def __init__(self, output: Console | None = None) -> None:
        """Initialize the CLI reporter."""
        self.console = output or console

    def print_header(self, title: str) -> None:
        """Print a bold header."""
        self.console.print(f"\n[bold cyan]{title}[/bold cyan]\n")

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]✗[/red] {message}")

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(f"[dim]{message}[/dim]")

    # ── Dependency coverage ────────────────────────────────────────────

    def print_dependency_report(self, result: ReportResult) -> None:
        """Print the per-dependency table followed by the totals."""
        table = Table(title=f"Dependency Coverage: {result.project}", title_style="bold cyan")
        table.add_column("Dependency", style="bold")
        table.add_column("Scope")
        table.add_column("Instructions", justify="right")
        table.add_column("Branches", justify="right")
        table.add_column("With Transitive", justify="right")

        for summary in sorted(result.dependencies, key=lambda d: (not d.is_root, d.dependency)):
            self._add_dependency_row(table, summary)

        table.add_section()
        self._add_total_row(table, "Project", result.project_usage)
        self._add_total_row(table, "Dependencies", result.grand_total)
        self._add_total_row(table, "Overall", result.overall_total)

        self.console.print(table)

        unresolved = result.unresolved_packages
        if unresolved:
            self.print_warning(
                f"{len(unresolved)} package(s) could not be attributed: {', '.join(unresolved)}"
            )

    def _add_dependency_row(self, table: Table, summary: DependencySummary) -> None:
        name = summary.dependency if summary.is_root else f"  └ {summary.dependency}"
        table.add_row(
            name,
            summary.scope,
            format_counter(summary.own_usage.instructions),
            format_counter(summary.own_usage.branches),
            format_counter(summary.aggregate_usage.instructions),
        )

    def _add_total_row(self, table: Table, label: str, usage: CoverageUsage) -> None:
        table.add_row(
            f"[bold]{label}[/bold]",
            "",
            format_counter(usage.instructions, bold=True),
            format_counter(usage.branches, bold=True),
            "",
        )


reporter = CLIReporter()
