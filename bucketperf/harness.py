"""Concurrent batch harness.

Each unit opens its own browser session, loads the results page, waits
for the table to fill, scrapes it and tears the session down.  All units
are launched at once and joined with a single ``asyncio.gather``; nothing
is aggregated until every unit has settled.

Public API:
    run_unit   -- execute one unit and return its outcome (never raises)
    run_batch  -- launch N units concurrently and aggregate their rows
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from bucketperf.browsers import get_browser, get_browser_map
from bucketperf.browsers.base import PageSession, PopulationTimeout
from bucketperf.config import WAIT_GRACE_S
from bucketperf.models import (
    BatchConfig,
    BatchResult,
    FailurePolicy,
    ScrapedRow,
    UnitOutcome,
)

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], PageSession]
Clock = Callable[[], str]

# Signature: (run_id, status, outcome_or_none)
ProgressCallback = Callable[[int, str, Optional[UnitOutcome]], None]


class BatchFailed(Exception):
    """Raised under the abort policy once all units settled and one failed."""

    def __init__(self, result: BatchResult):
        self.result = result
        failed = result.failed_units
        details = "; ".join(f"run {o.run_id}: {o.error}" for o in failed)
        super().__init__(f"{len(failed)} of {len(result.outcomes)} runs failed ({details})")


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


async def _close_session(session: PageSession, run_id: int) -> None:
    try:
        await session.close()
    except Exception as exc:
        logger.debug("Run %d: session teardown failed: %s", run_id, exc)


async def run_unit(
    run_id: int,
    session_factory: SessionFactory,
    config: BatchConfig,
    clock: Clock = utc_timestamp,
) -> UnitOutcome:
    """Load, wait, scrape and tear down one isolated session.

    Every failure, including a population timeout, is captured in the
    returned outcome.  The session is closed whether or not scraping
    succeeded.
    """
    try:
        session = session_factory()
    except Exception as exc:
        logger.warning("Run %d could not create a session: %s", run_id, exc)
        return UnitOutcome(run_id=run_id, error=str(exc) or type(exc).__name__)

    try:
        await session.open()
        await session.load(config.page_url)
        try:
            await asyncio.wait_for(
                session.wait_for_rows(config.expected_rows, config.wait_timeout),
                timeout=config.wait_timeout + WAIT_GRACE_S,
            )
        except asyncio.TimeoutError as exc:
            raise PopulationTimeout(config.expected_rows, config.wait_timeout) from exc

        cells = await session.scrape_rows()
        captured_at = clock()
        rows = [ScrapedRow(timestamp=captured_at, run_id=run_id, cells=c) for c in cells]
    except Exception as exc:
        logger.warning("Run %d failed: %s", run_id, exc)
        return UnitOutcome(run_id=run_id, error=str(exc) or type(exc).__name__)
    finally:
        await _close_session(session, run_id)

    logger.debug("Run %d scraped %d rows", run_id, len(rows))
    return UnitOutcome(run_id=run_id, rows=rows)


async def run_batch(
    trial_count: int,
    config: BatchConfig | None = None,
    session_factory: SessionFactory | None = None,
    clock: Clock = utc_timestamp,
    progress_callback: ProgressCallback | None = None,
) -> BatchResult:
    """Run *trial_count* units concurrently and aggregate their rows.

    Rows are appended in submission order (run 1 first) and, within a run,
    in scrape order.  Under :attr:`FailurePolicy.SKIP` failed runs simply
    contribute nothing; under :attr:`FailurePolicy.ABORT` a single failed
    run raises :class:`BatchFailed`, but only after every run has settled.
    """
    if trial_count < 1:
        raise ValueError(f"trial_count must be at least 1, got {trial_count}")
    config = config or BatchConfig()

    if session_factory is None:
        if config.browser not in get_browser_map():
            raise ValueError(
                f"Unknown browser: {config.browser!r}. Available: {list(get_browser_map())}"
            )

        def session_factory() -> PageSession:
            return get_browser(config.browser, headless=config.headless)

    async def _tracked(run_id: int) -> UnitOutcome:
        if progress_callback:
            progress_callback(run_id, "running", None)
        outcome = await run_unit(run_id, session_factory, config, clock)
        if progress_callback:
            progress_callback(run_id, "done" if outcome.ok else "failed", outcome)
        return outcome

    tasks = [_tracked(run_id) for run_id in range(1, trial_count + 1)]
    outcomes = await asyncio.gather(*tasks)

    result = BatchResult(outcomes=list(outcomes))
    if config.policy is FailurePolicy.ABORT and result.failed_units:
        raise BatchFailed(result)

    for outcome in result.outcomes:
        if outcome.ok:
            result.rows.extend(outcome.rows)

    return result
