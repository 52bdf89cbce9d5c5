"""Rich terminal output for bucketperf."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.live import Live
from rich.table import Table
from rich.text import Text

from bucketperf.config import BATCH_COLUMNS, DEFAULT_TIME_TAKEN
from bucketperf.decompose import format_value
from bucketperf.models import BatchResult, ResultRecord

console = Console()

_SENTINEL_TEXT = format_value(DEFAULT_TIME_TAKEN)


def _fmt_ms(value: str, failed: bool) -> Text:
    """Format a fixed-point millisecond string, or a failed marker."""
    if failed:
        return Text("failed", style="red")
    return Text(f"{value}ms")


def _fmt_percent(record: ResultRecord) -> Text:
    if record.error:
        return Text("\u2014", style="dim")
    # Positive: the direct browser download beat the server-mediated one
    style = "green" if record.percent_change > 0 else "yellow"
    return Text(f"{record.percent_change:+d}%", style=style)


class ProgressTracker:
    """Live progress display for matrix trials or batch runs."""

    def __init__(self, labels: list[str], title: str = "Run"):
        self.labels = labels
        self.title = title
        self.status: dict[str, str] = {label: "waiting" for label in labels}
        self.detail: dict[str, str] = {label: "" for label in labels}
        self.live: Optional[Live] = None

    def _build_table(self) -> Table:
        table = Table(show_header=True, expand=False, border_style="dim")
        table.add_column(self.title, style="bold")
        table.add_column("Status")
        table.add_column("Detail", style="dim")

        for label in self.labels:
            status = self.status[label]
            style = "green" if status == "done" else ("red" if status == "failed" else "yellow")
            table.add_row(label, f"[{style}]{status}[/{style}]", self.detail[label])

        return table

    def start(self) -> None:
        self.live = Live(self._build_table(), console=console, refresh_per_second=4)
        self.live.start()

    def update(self, label: str, status: str, detail: str = "") -> None:
        self.status[label] = status
        self.detail[label] = detail
        if self.live:
            self.live.update(self._build_table())

    def finish(self) -> None:
        if self.live:
            self.live.stop()


# ── Trial records ─────────────────────────────────────────────────────


def build_records_table(records: list[ResultRecord]) -> Table:
    """Build the per-trial decomposition table."""
    table = Table(
        title="Download latency by vantage point",
        show_header=True,
        border_style="dim",
        title_style="bold",
    )
    table.add_column("Bucket", style="bold")
    table.add_column("Location")
    table.add_column("Object")
    table.add_column("MiB/s", justify="right")
    table.add_column("Browser", justify="right")
    table.add_column("Server", justify="right")
    table.add_column("Server client", justify="right")
    table.add_column("Server hop", justify="right")
    table.add_column("Browser boost", justify="right")

    for r in records:
        # Timings fail together; a real speed is never negative
        failed = r.error is not None
        if failed or r.speed_mib_per_sec == _SENTINEL_TEXT:
            speed = Text("\u2014", style="dim")
        else:
            speed = Text(r.speed_mib_per_sec)
        table.add_row(
            r.bucket_name,
            r.location,
            r.object_id,
            speed,
            _fmt_ms(r.time_taken_client, failed),
            _fmt_ms(r.time_taken_server, failed),
            _fmt_ms(r.time_taken_server_client_upstream, failed),
            _fmt_ms(r.time_taken_server_network_hop, failed),
            _fmt_percent(r),
        )

    return table


def render_records(records: list[ResultRecord]) -> None:
    if not records:
        console.print("[dim]No results.[/dim]")
        return
    console.print()
    console.print(build_records_table(records))
    for r in records:
        if r.error:
            console.print(f"  [dim]{r.bucket_name}/{r.object_id}: {r.error}[/dim]")


# ── Batch runs ────────────────────────────────────────────────────────


def render_batch(result: BatchResult) -> None:
    """Render the aggregated rows of a batch and a per-run summary."""
    table = Table(show_header=True, border_style="dim", title="Scraped results", title_style="bold")
    table.add_column("Captured", style="dim")
    table.add_column("Run", justify="right")
    for column in BATCH_COLUMNS:
        table.add_column(column)

    for row in result.rows:
        table.add_row(row.timestamp, str(row.run_id), *row.cells[:len(BATCH_COLUMNS)])

    console.print()
    console.print(table)

    ok = len(result.outcomes) - len(result.failed_units)
    console.print(f"\n[bold]{ok}/{len(result.outcomes)} runs succeeded, {len(result.rows)} rows[/bold]")
    for o in result.failed_units:
        console.print(f"  [red]run {o.run_id}:[/red] {o.error}")


def render_regions(regions: dict[str, str]) -> None:
    table = Table(show_header=True, border_style="dim")
    table.add_column("Region", style="bold")
    table.add_column("Location")
    for code, label in regions.items():
        table.add_row(code, label)
    console.print(table)


def render_error(message: str) -> None:
    """Display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def render_warning(message: str) -> None:
    """Display a warning message."""
    console.print(f"[yellow]Warning:[/yellow] {message}")
