"""Timed HTTP GET probes.

A probe's duration runs from just before the request is dispatched until
the response body has been fully read.  Every probe in bucketperf uses this
definition, so client-side and server-side timings stay comparable.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

import httpx

from bucketperf.config import USER_AGENT
from bucketperf.models import Measurement, TrialConfig

logger = logging.getLogger(__name__)


@dataclass
class ProbeResult:
    """Elapsed time of one GET plus the response headers, if any."""

    elapsed: Measurement
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    status_code: int | None = None

    @property
    def ok(self) -> bool:
        return self.elapsed.ok


def build_client(config: TrialConfig) -> httpx.AsyncClient:
    """Create the HTTP client used for one trial's probes."""
    return httpx.AsyncClient(
        http2=config.http2,
        timeout=httpx.Timeout(config.timeout),
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    )


async def timed_get(client: httpx.AsyncClient, url: str) -> ProbeResult:
    """GET *url* once and time it.

    Transport errors, timeouts and non-2xx responses produce a failed
    measurement instead of raising.  There are no retries.
    """
    t0 = time.perf_counter()
    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.debug("Probe failed for %s: %s", url, exc)
        status = exc.response.status_code if isinstance(exc, httpx.HTTPStatusError) else None
        return ProbeResult(
            elapsed=Measurement.failed(f"GET {url} failed: {exc}"),
            status_code=status,
        )
    elapsed_ms = (time.perf_counter() - t0) * 1000.0

    return ProbeResult(
        elapsed=Measurement.measured(elapsed_ms),
        headers=response.headers,
        status_code=response.status_code,
    )


async def probe_latency(client: httpx.AsyncClient, url: str) -> Measurement:
    """Return only the elapsed milliseconds of a GET to *url*."""
    result = await timed_get(client, url)
    return result.elapsed
