"""
Console report generator for oasreplay.

Prints the run summary with Rich. The per-entry diagnostics are printed by
the engine as it goes; this module only adds the closing summary and, in
verbose mode, a table of the entries that did not pass.
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from oasreplay.replay.engine import ReplayResult, RunSummary
from oasreplay.schema import EntryStatus


# Status icons
ICON_VALID = "[green]✓[/green]"
ICON_INVALID = "[red]✗[/red]"
ICON_SKIPPED = "[yellow]⊘[/yellow]"


def generate_console_report(
    result: ReplayResult,
    console: Console | None = None,
    verbose: bool = False,
) -> None:
    """
    Print the closing report for a run.

    Args:
        result: The replay result
        console: Rich Console instance (creates one if not provided)
        verbose: Also list every entry that was invalid or skipped
    """
    if console is None:
        console = Console()

    if verbose:
        _print_problem_entries(console, result)

    print_summary(result.summary, console)


def print_summary(summary: RunSummary, console: Console | None = None) -> None:
    """Print total, valid and invalid counts."""
    if console is None:
        console = Console()

    console.print()
    console.print("[bold]Validation Summary[/bold]")

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column("Metric", style="dim")
    stats_table.add_column("Value")

    stats_table.add_row("Total requests", str(summary.total))
    stats_table.add_row(
        "Valid requests",
        f"[green]{summary.valid}[/green]" if summary.valid > 0 else "0",
    )
    stats_table.add_row(
        "Invalid requests",
        f"[red]{summary.invalid}[/red]" if summary.invalid > 0 else "0",
    )
    if summary.skipped:
        stats_table.add_row("Skipped", f"[yellow]{summary.skipped}[/yellow]")

    console.print(stats_table)


def _print_problem_entries(console: Console, result: ReplayResult) -> None:
    """Print a table of invalid and skipped entries."""
    problems = [e for e in result.entries if e.status != EntryStatus.VALID]
    if not problems:
        return

    table = Table(show_header=True, header_style="bold", expand=True)
    table.add_column("#", style="dim", width=4, justify="right")
    table.add_column("Status", width=6, justify="center")
    table.add_column("Request", style="cyan")
    table.add_column("Details", overflow="fold")

    for entry in problems:
        if entry.status == EntryStatus.SKIPPED:
            icon = ICON_SKIPPED
            details = escape(entry.skip_reason or "")
        else:
            icon = ICON_INVALID
            details = "\n".join(
                f"[dim]{error.phase}:[/dim] {escape(_truncate(error.message, 120))}"
                for error in entry.errors
            )
        table.add_row(
            str(entry.index),
            icon,
            escape(_printable(f"{entry.method} {entry.path}")),
            details,
        )

    console.print()
    console.print(table)


def _printable(s: str) -> str:
    """Escape text that cannot be written as UTF-8 (lone surrogates)."""
    return s.encode("utf-8", "backslashreplace").decode("utf-8")


def _truncate(s: str, max_len: int) -> str:
    """Truncate string with ellipsis."""
    if len(s) <= max_len:
        return s
    return s[: max_len - 3] + "..."
