"""Console rendering of an annotation run."""

from typing import Any

from rich.console import Console
from rich.table import Table

from .annotator import AnnotationResult
from .merger import extract_issue_keys, extract_issue_list
from .models import LinkStatus

STATUS_STYLES = {
    LinkStatus.SHORTENED: "green",
    LinkStatus.FAILED: "red",
    LinkStatus.TIMED_OUT: "yellow",
}


def build_report_table(result: AnnotationResult, key_field: str = "key") -> Table:
    """Build a table with one row per issue and one column per link spec."""
    table = Table(title="Shortened Links")
    table.add_column("Issue", style="cyan")
    for name in result.spec_names:
        table.add_column(name)

    keys = extract_issue_keys(extract_issue_list(result.data), key_field)
    for key, links in zip(keys, result.table):
        row: list[Any] = [key]
        for name in result.spec_names:
            link = links.get(name)
            if link is None:
                row.append("[dim]missing[/dim]")
            elif link.status is LinkStatus.SHORTENED:
                row.append(f"[green]{link.display_url}[/green]")
            else:
                style = STATUS_STYLES[link.status]
                row.append(f"[{style}]{link.status.value}[/{style}]")
        table.add_row(*row)
    return table


def print_report(
    result: AnnotationResult,
    console: Console | None = None,
    key_field: str = "key",
) -> None:
    """Print the link table followed by a one-line summary."""
    console = console or Console()
    console.print(build_report_table(result, key_field))

    for error in result.routing_errors:
        console.print(f"[yellow]⚠️  {error.message}[/yellow]")

    console.print(
        f"\n[blue]Summary: Shortened {result.shortened_count}/{result.expected} "
        f"links ({len(result.failures)} failed, "
        f"{len(result.missing)} missing)[/blue]"
    )
