"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from slowpoke.analyzer import AnalysisResult
    from slowpoke.config import AnalyzerConfig
    from slowpoke.stats import TestStatistics

NO_DATA_MESSAGE = "No test data found in the file."

_MS_PER_SECOND = 1000
_MS_PER_MINUTE = 60_000
_ELLIPSIS = "..."


def format_duration(milliseconds: float) -> str:
    """Format a millisecond duration as ``ms``, ``s`` or ``m s``."""
    if milliseconds < _MS_PER_SECOND:
        return f"{round(milliseconds)}ms"
    if milliseconds < _MS_PER_MINUTE:
        return f"{milliseconds / _MS_PER_SECOND:.2f}s"
    minutes = int(milliseconds // _MS_PER_MINUTE)
    seconds = (milliseconds % _MS_PER_MINUTE) / _MS_PER_SECOND
    return f"{minutes}m {seconds:.1f}s"


def truncate_name(name: str, width: int) -> str:
    """Shorten *name* to *width* characters, ending in ``...`` when cut."""
    if len(name) > width:
        return name[: width - len(_ELLIPSIS)] + _ELLIPSIS
    return name


def row_style(duration: int, threshold_ms: int, mean: float) -> str:
    """Return the Rich style for a table row (empty for no highlight)."""
    if duration > threshold_ms:
        return "red"
    if duration < mean / 2:
        return "green"
    return ""


class TerminalReporter:
    """Rich terminal output for a duration analysis."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]✗[/red] {message}")

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    def print_no_data(self) -> None:
        """Print the message shown when a log resolved no test durations."""
        self.print_error(NO_DATA_MESSAGE)

    def print_report(self, result: AnalysisResult, config: AnalyzerConfig) -> None:
        """Print the full report: statistics, durations, groups and slow tests."""
        if config.show_statistics:
            self.print_statistics(result.statistics)
        self.print_duration_table(result, config)
        if config.show_groups:
            self.print_group_breakdown(result)
        self.print_slow_summary(result, config.slow_threshold_ms)

    def print_statistics(self, stats: TestStatistics) -> None:
        """Print the statistics block."""
        table = Table(title="Test Suite Statistics", title_style="bold cyan", show_header=False)
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right")

        table.add_row("Total Duration", format_duration(stats.total_duration))
        table.add_row("Average Duration", format_duration(round(stats.mean)))
        table.add_row("Median Duration", format_duration(round(stats.median)))
        table.add_row("Standard Deviation", format_duration(round(stats.standard_dev)))
        table.add_row("Fastest Test", format_duration(stats.fastest_test))
        table.add_row("Slowest Test", format_duration(stats.slowest_test))
        table.add_row("Number of Tests", str(stats.count))

        self.console.print(table)

    def print_duration_table(self, result: AnalysisResult, config: AnalyzerConfig) -> None:
        """Print every test, slowest first."""
        table = Table(title="Test Duration Analysis", title_style="bold cyan")
        table.add_column("Test Name", style="bold", no_wrap=True)
        table.add_column("Duration", justify="right")

        mean = result.statistics.mean
        for name, duration in result.ranked:
            style = row_style(duration, config.slow_threshold_ms, mean) if config.use_colors else ""
            table.add_row(
                truncate_name(name, config.max_name_width),
                format_duration(duration),
                style=style or None,
            )

        self.console.print(table)

    def print_group_breakdown(self, result: AnalysisResult) -> None:
        """Print test count and total duration per group id."""
        summaries = result.group_summaries()
        if not summaries:
            return

        table = Table(title="Group Breakdown", title_style="bold cyan")
        table.add_column("Group", style="bold")
        table.add_column("Tests", justify="right")
        table.add_column("Total Duration", justify="right")

        for summary in summaries:
            table.add_row(
                summary.group_id,
                str(summary.test_count),
                format_duration(summary.total_duration),
            )

        self.console.print(table)

    def print_slow_summary(self, result: AnalysisResult, threshold_ms: int) -> None:
        """Print how many tests exceeded *threshold_ms*."""
        slow = result.slow_tests(threshold_ms)
        if slow:
            self.print_warning(f"{len(slow)} tests exceeded the {threshold_ms}ms threshold")
