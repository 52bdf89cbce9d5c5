"""CLI entry point and orchestration for bucketperf."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from bucketperf import __version__
from bucketperf.browsers import list_browsers
from bucketperf.config import (
    DEFAULT_BROWSER,
    DEFAULT_EXPECTED_ROWS,
    DEFAULT_RESULTS_PAGE,
    DEFAULT_RUNS,
    DEFAULT_SERVER_URL,
    DEFAULT_TIMEOUT,
    DEFAULT_WAIT_TIMEOUT,
    OBJECT_IDS,
    REGIONS_MAP,
    SERVER_URL_ENV,
)
from bucketperf.models import BatchConfig, FailurePolicy, ResultRecord, TrialConfig


def _configure_logging(verbose: bool) -> None:
    from rich.logging import RichHandler

    from bucketperf.display import console

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _emit(content: str, output: str | None, quiet: bool) -> None:
    from bucketperf.display import console
    from bucketperf.export import write_to_file

    if output:
        write_to_file(content, output)
        if not quiet:
            console.print(f"[dim]Results written to {output}[/dim]")
    else:
        click.echo(content)


def _run_async(coro, quiet: bool):
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        if not quiet:
            from bucketperf.display import console
            console.print("\n[yellow]Interrupted.[/yellow]")
        sys.exit(130)


def _handle_records(
    records: list[ResultRecord],
    json_output: bool,
    csv_output: bool,
    output: str | None,
    quiet: bool,
) -> None:
    from bucketperf.display import render_records
    from bucketperf.export import export_records_csv, export_records_json

    if json_output:
        _emit(export_records_json(records), output, quiet)
        return
    if csv_output:
        _emit(export_records_csv(records), output, quiet)
        return

    render_records(records)
    if output:
        _emit(export_records_json(records), output, quiet)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.version_option(version=__version__)
def main(verbose: bool) -> None:
    """bucketperf - Regional bucket download latency benchmarks.

    Times object downloads from regional storage buckets both directly and
    through a benchmark server, and splits the server time into its own
    upstream fetch and the network hop back to the caller.
    """
    _configure_logging(verbose)


def _trial_options(f):
    f = click.option("--server-url", default=DEFAULT_SERVER_URL, envvar=SERVER_URL_ENV,
                     help="Benchmark server base URL", show_default=True)(f)
    f = click.option("-t", "--timeout", default=DEFAULT_TIMEOUT,
                     help="Request timeout in seconds", show_default=True)(f)
    f = click.option("--http1", is_flag=True, help="Disable HTTP/2")(f)
    f = click.option("--json", "json_output", is_flag=True, help="Output JSON to stdout")(f)
    f = click.option("--csv", "csv_output", is_flag=True, help="Output CSV to stdout")(f)
    f = click.option("-o", "--output", default=None, help="Write results to file")(f)
    f = click.option("-q", "--quiet", is_flag=True, help="Suppress progress, show only results")(f)
    return f


@main.command()
@click.argument("object_id", metavar="OBJECT")
@click.argument("region_id", metavar="REGION")
@_trial_options
def trial(
    object_id: str,
    region_id: str,
    server_url: str,
    timeout: float,
    http1: bool,
    json_output: bool,
    csv_output: bool,
    output: str | None,
    quiet: bool,
) -> None:
    """Measure one OBJECT (e.g. 2mib.txt) from the bucket in REGION."""
    from bucketperf.display import render_error
    from bucketperf.trial import InvalidTrialParameter, run_trial

    config = TrialConfig(server_url=server_url, timeout=timeout, http2=not http1)
    try:
        record = _run_async(run_trial(object_id, region_id, config), quiet)
    except InvalidTrialParameter as exc:
        render_error(str(exc))
        sys.exit(1)

    _handle_records([record], json_output, csv_output, output, quiet)


@main.command()
@click.option("-f", "--object", "object_ids", multiple=True,
              help="Object to download (repeatable) [default: all]")
@click.option("-r", "--region", "region_ids", multiple=True,
              help="Bucket region (repeatable) [default: all]")
@_trial_options
def matrix(
    object_ids: tuple[str, ...],
    region_ids: tuple[str, ...],
    server_url: str,
    timeout: float,
    http1: bool,
    json_output: bool,
    csv_output: bool,
    output: str | None,
    quiet: bool,
) -> None:
    """Measure every object/region combination, one trial at a time."""
    from bucketperf.display import ProgressTracker, console, render_error
    from bucketperf.trial import InvalidTrialParameter, run_matrix

    objects = list(object_ids) or list(OBJECT_IDS)
    regions = list(region_ids) or list(REGIONS_MAP)
    config = TrialConfig(server_url=server_url, timeout=timeout, http2=not http1)

    labels = [f"{o} @ {r}" for o in objects for r in regions]
    progress = None
    if not quiet and not json_output and not csv_output:
        progress = ProgressTracker(labels, title="Trial")

    def on_progress(index: int, total: int, record: ResultRecord | None) -> None:
        if progress is None:
            return
        if record is None:
            progress.update(labels[index], "measuring")
        elif record.error:
            progress.update(labels[index], "failed", record.error)
        else:
            progress.update(labels[index], "done", f"{record.speed_mib_per_sec} MiB/s")

    if progress:
        console.print(f"[bold]Measuring {len(labels)} trials...[/bold]\n")
        progress.start()
    try:
        records = _run_async(run_matrix(objects, regions, config, on_progress), quiet)
    except InvalidTrialParameter as exc:
        render_error(str(exc))
        sys.exit(1)
    finally:
        if progress:
            progress.finish()

    _handle_records(records, json_output, csv_output, output, quiet)


@main.command()
@click.option("-n", "--runs", default=DEFAULT_RUNS, type=click.IntRange(min=1),
              help="Concurrent browser runs", show_default=True)
@click.option("--page-url", default=DEFAULT_RESULTS_PAGE, help="Results page to load", show_default=True)
@click.option("--rows", "expected_rows", default=DEFAULT_EXPECTED_ROWS, type=click.IntRange(min=1),
              help="Row count that marks the table as populated", show_default=True)
@click.option("-w", "--wait", "wait_timeout", default=DEFAULT_WAIT_TIMEOUT,
              help="Seconds to wait for the table to populate", show_default=True)
@click.option("-b", "--browser", default=DEFAULT_BROWSER, type=click.Choice(list_browsers()),
              help="Browser to drive", show_default=True)
@click.option("--headed", is_flag=True, help="Show browser windows")
@click.option("--policy", default=FailurePolicy.SKIP.value,
              type=click.Choice([p.value for p in FailurePolicy]),
              help="skip: drop failed runs; abort: fail the batch if any run fails",
              show_default=True)
@click.option("--json", "json_output", is_flag=True, help="Output JSON to stdout")
@click.option("-o", "--output", default=None, help="Write CSV rows to file")
@click.option("-q", "--quiet", is_flag=True, help="Suppress progress, show only results")
def batch(
    runs: int,
    page_url: str,
    expected_rows: int,
    wait_timeout: float,
    browser: str,
    headed: bool,
    policy: str,
    json_output: bool,
    output: str | None,
    quiet: bool,
) -> None:
    """Load the results page in RUNS concurrent browsers and collect every row."""
    from bucketperf.display import ProgressTracker, console, render_batch, render_error, render_warning
    from bucketperf.export import export_batch_csv, export_batch_json
    from bucketperf.harness import BatchFailed, run_batch

    config = BatchConfig(
        runs=runs,
        page_url=page_url,
        expected_rows=expected_rows,
        wait_timeout=wait_timeout,
        browser=browser,
        headless=not headed,
        policy=FailurePolicy(policy),
    )

    labels = [f"run {i}" for i in range(1, runs + 1)]
    progress = None
    if not quiet and not json_output:
        progress = ProgressTracker(labels)

    def on_progress(run_id: int, status: str, outcome) -> None:
        if progress is None:
            return
        detail = ""
        if outcome is not None:
            detail = outcome.error or f"{len(outcome.rows)} rows"
        progress.update(labels[run_id - 1], status, detail)

    if progress:
        console.print(f"[bold]Launching {runs} {browser} sessions...[/bold]\n")
        progress.start()
    try:
        result = _run_async(run_batch(runs, config, progress_callback=on_progress), quiet)
    except BatchFailed as exc:
        render_error(str(exc))
        sys.exit(1)
    finally:
        if progress:
            progress.finish()

    if result.failed_units and not quiet and not json_output:
        render_warning(
            f"{len(result.failed_units)} of {len(result.outcomes)} runs failed; their rows are excluded"
        )

    if json_output:
        _emit(export_batch_json(result), output, quiet)
        return

    if not quiet:
        render_batch(result)
    if output:
        _emit(export_batch_csv(result.rows), output, quiet)
    elif quiet:
        click.echo(export_batch_csv(result.rows))


@main.command()
def regions() -> None:
    """List the supported bucket regions."""
    from bucketperf.display import render_regions

    render_regions(REGIONS_MAP)


if __name__ == "__main__":
    main()
