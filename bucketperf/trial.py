"""Trial orchestration: validate, resolve the bucket, time, decompose.

Public API:
    run_trial   -- measure one object from one region
    run_matrix  -- measure every (object, region) pair, one at a time
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

import httpx

from bucketperf.config import BUCKET_PREFIX, FILESIZE_BYTES, FILESIZE_MIB, REGIONS_MAP
from bucketperf.decompose import decompose, format_value
from bucketperf.models import ResultRecord, TrialConfig, TrialRequest
from bucketperf.probe import build_client
from bucketperf.timer import measure_dual_vantage

logger = logging.getLogger(__name__)

# Signature: (trial_index, total_trials, record_or_none)
ProgressCallback = Callable[[int, int, Optional[ResultRecord]], None]


class InvalidTrialParameter(ValueError):
    """A trial named an object or region outside the fixed catalogs."""

    def __init__(self, parameter: str, value: str, allowed: Iterable[str]):
        self.parameter = parameter
        self.value = value
        self.allowed = list(allowed)
        super().__init__(
            f"Invalid {parameter}: {value!r}. Must be one of: {', '.join(self.allowed)}"
        )


def validate_request(object_id: str, region_id: str) -> TrialRequest:
    """Check both trial parameters against the catalogs."""
    if object_id not in FILESIZE_BYTES or object_id not in FILESIZE_MIB:
        raise InvalidTrialParameter("object", object_id, FILESIZE_BYTES)
    if region_id not in REGIONS_MAP:
        raise InvalidTrialParameter("region", region_id, REGIONS_MAP)
    return TrialRequest(object_id=object_id, region_id=region_id)


def bucket_name_for(region_id: str) -> str:
    return f"{BUCKET_PREFIX}{region_id}"


async def run_trial(
    object_id: str,
    region_id: str,
    config: TrialConfig | None = None,
    client: httpx.AsyncClient | None = None,
) -> ResultRecord:
    """Measure *object_id* from the bucket in *region_id*.

    Raises :class:`InvalidTrialParameter` before any network activity if
    either parameter is unknown.  Measurement failures never raise; they
    show up as sentinel values in the returned record.
    """
    request = validate_request(object_id, region_id)
    config = config or TrialConfig()

    if client is None:
        async with build_client(config) as own_client:
            return await _measure(request, config, own_client)
    return await _measure(request, config, client)


async def _measure(
    request: TrialRequest,
    config: TrialConfig,
    client: httpx.AsyncClient,
) -> ResultRecord:
    bucket_name = bucket_name_for(request.region_id)
    triple = await measure_dual_vantage(
        client, bucket_name, request.object_id, config.server_url,
    )
    if not triple.ok:
        logger.info("Trial %s/%s degraded: %s", bucket_name, request.object_id, triple.error)

    size_bytes = FILESIZE_BYTES[request.object_id]
    size_mib = FILESIZE_MIB[request.object_id]
    parts = decompose(triple, size_bytes, size_mib)

    return ResultRecord(
        bucket_name=bucket_name,
        region=request.region_id,
        location=REGIONS_MAP[request.region_id],
        object_id=request.object_id,
        time_taken_client=format_value(triple.client),
        time_taken_server=format_value(triple.server),
        time_taken_server_client_upstream=format_value(triple.server_client_latency),
        time_taken_server_network_hop=format_value(parts.network_hop),
        percent_change=parts.percent_change,
        file_size_bytes=str(size_bytes),
        speed_bytes_per_sec=format_value(parts.speed_bps),
        speed_mib_per_sec=format_value(parts.speed_mibps),
        error=triple.error,
    )


async def run_matrix(
    object_ids: list[str],
    region_ids: list[str],
    config: TrialConfig | None = None,
    progress_callback: ProgressCallback | None = None,
    client: httpx.AsyncClient | None = None,
) -> list[ResultRecord]:
    """Run one trial per (object, region) pair, sequentially.

    Every pair is validated before the first trial starts.  Records come
    back in object-major request order.
    """
    requests = [
        validate_request(object_id, region_id)
        for object_id in object_ids
        for region_id in region_ids
    ]
    config = config or TrialConfig()
    total = len(requests)
    records: list[ResultRecord] = []

    async def _run_all(c: httpx.AsyncClient) -> None:
        for i, req in enumerate(requests):
            if progress_callback:
                progress_callback(i, total, None)
            record = await _measure(req, config, c)
            records.append(record)
            if progress_callback:
                progress_callback(i, total, record)

    if client is None:
        async with build_client(config) as own_client:
            await _run_all(own_client)
    else:
        await _run_all(client)

    return records
