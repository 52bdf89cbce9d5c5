"""Dual-vantage timing: the same object fetched directly and via the server."""

from __future__ import annotations

import logging
import math
from typing import Optional

import httpx

from bucketperf.config import (
    LATENCY_HEADER,
    OBJECT_URL_TEMPLATE,
    SERVER_DOWNLOAD_PATH,
)
from bucketperf.models import Measurement, TimingTriple
from bucketperf.probe import timed_get

logger = logging.getLogger(__name__)


def object_url(bucket_name: str, object_id: str) -> str:
    return OBJECT_URL_TEMPLATE.format(bucket=bucket_name, object_id=object_id)


def server_download_url(server_url: str, bucket_name: str, object_id: str) -> str:
    path = SERVER_DOWNLOAD_PATH.format(bucket=bucket_name, object_id=object_id)
    return server_url.rstrip("/") + path


def parse_latency_header(value: Optional[str]) -> Measurement:
    """Parse the server's self-reported upstream latency header (ms)."""
    if value is None:
        return Measurement.failed(f"missing {LATENCY_HEADER} header")
    try:
        latency = float(value.strip())
    except ValueError:
        return Measurement.failed(f"unparsable {LATENCY_HEADER} header: {value!r}")
    if not math.isfinite(latency) or latency < 0:
        return Measurement.failed(f"invalid {LATENCY_HEADER} header: {value!r}")
    return Measurement.measured(latency)


async def measure_dual_vantage(
    client: httpx.AsyncClient,
    bucket_name: str,
    object_id: str,
    server_url: str,
) -> TimingTriple:
    """Time a direct bucket GET, then a server-mediated GET of the same object.

    The direct request always finishes before the server request starts.
    If anything fails the whole triple is failed; a partially measured
    triple is never returned.
    """
    try:
        direct = await timed_get(client, object_url(bucket_name, object_id))
        if not direct.ok:
            return TimingTriple.failed(direct.elapsed.error or "client probe failed")

        mediated = await timed_get(
            client, server_download_url(server_url, bucket_name, object_id),
        )
        if not mediated.ok:
            return TimingTriple.failed(mediated.elapsed.error or "server probe failed")

        upstream = parse_latency_header(mediated.headers.get(LATENCY_HEADER))
        if not upstream.ok:
            return TimingTriple.failed(upstream.error or "invalid latency header")
    except Exception as exc:
        logger.debug("Dual-vantage timing failed for %s/%s: %s", bucket_name, object_id, exc)
        return TimingTriple.failed(f"timing failed: {exc}")

    logger.debug(
        "%s/%s: client %.3fms, server %.3fms, server upstream %.3fms",
        bucket_name, object_id,
        direct.elapsed.value, mediated.elapsed.value, upstream.value,
    )
    return TimingTriple(
        client=direct.elapsed,
        server=mediated.elapsed,
        server_client_latency=upstream,
    )
