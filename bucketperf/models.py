"""Data models for bucketperf."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Optional

from bucketperf.config import (
    DEFAULT_BROWSER,
    DEFAULT_EXPECTED_ROWS,
    DEFAULT_RESULTS_PAGE,
    DEFAULT_RUNS,
    DEFAULT_SERVER_URL,
    DEFAULT_TIME_TAKEN,
    DEFAULT_TIMEOUT,
    DEFAULT_WAIT_TIMEOUT,
)


@dataclass(frozen=True)
class Measurement:
    """A duration or derived quantity that was either measured or failed.

    Exactly one of ``value`` and ``error`` is set.  Use :meth:`or_sentinel`
    to get a plain number for formatting.
    """

    value: Optional[float] = None
    error: Optional[str] = None

    @classmethod
    def measured(cls, value: float) -> Measurement:
        if not math.isfinite(value):
            return cls(error=f"non-finite value: {value!r}")
        return cls(value=float(value))

    @classmethod
    def failed(cls, reason: str) -> Measurement:
        return cls(error=reason)

    @property
    def ok(self) -> bool:
        return self.error is None

    def or_sentinel(self) -> float:
        return self.value if self.ok else float(DEFAULT_TIME_TAKEN)


@dataclass(frozen=True)
class TimingTriple:
    """Client, server and server-upstream durations for one trial (ms)."""

    client: Measurement
    server: Measurement
    server_client_latency: Measurement

    @classmethod
    def failed(cls, reason: str) -> TimingTriple:
        m = Measurement.failed(reason)
        return cls(client=m, server=m, server_client_latency=m)

    @property
    def ok(self) -> bool:
        return self.client.ok and self.server.ok and self.server_client_latency.ok

    @property
    def error(self) -> Optional[str]:
        for m in (self.client, self.server, self.server_client_latency):
            if m.error:
                return m.error
        return None


@dataclass(frozen=True)
class TrialRequest:
    """One object from one region."""

    object_id: str
    region_id: str


@dataclass(frozen=True)
class ResultRecord:
    """Normalized output of one trial.

    Numeric fields are fixed-point strings, except ``percent_change``.
    """

    bucket_name: str
    region: str
    location: str
    object_id: str
    time_taken_client: str
    time_taken_server: str
    time_taken_server_client_upstream: str
    time_taken_server_network_hop: str
    percent_change: int
    file_size_bytes: str
    speed_bytes_per_sec: str
    speed_mib_per_sec: str
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "bucketName": self.bucket_name,
            "region": self.region,
            "location": self.location,
            "objectId": self.object_id,
            "timeTakenClient": self.time_taken_client,
            "timeTakenServer": self.time_taken_server,
            "timeTakenServerClientUpstream": self.time_taken_server_client_upstream,
            "timeTakenServerNetworkHop": self.time_taken_server_network_hop,
            "percentChange": self.percent_change,
            "fileSizeBytes": self.file_size_bytes,
            "speedBytesPerSec": self.speed_bytes_per_sec,
            "speedMiBPerSec": self.speed_mib_per_sec,
        }


@dataclass(frozen=True)
class ScrapedRow:
    """A results-table row captured by one batch unit."""

    timestamp: str
    run_id: int
    cells: list[str] = field(default_factory=list)


@dataclass
class UnitOutcome:
    """Settled result of one batch unit: rows on success, error otherwise."""

    run_id: int
    rows: list[ScrapedRow] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class FailurePolicy(str, enum.Enum):
    """What a batch does when one of its units fails."""

    SKIP = "skip"    # failed units contribute no rows; the rest still do
    ABORT = "abort"  # any failed unit fails the whole batch


@dataclass
class BatchResult:
    """Aggregated rows of a batch plus every unit's outcome."""

    rows: list[ScrapedRow] = field(default_factory=list)
    outcomes: list[UnitOutcome] = field(default_factory=list)

    @property
    def failed_units(self) -> list[UnitOutcome]:
        return [o for o in self.outcomes if not o.ok]


@dataclass
class TrialConfig:
    """Configuration for measuring trials."""

    server_url: str = DEFAULT_SERVER_URL
    timeout: float = DEFAULT_TIMEOUT
    http2: bool = True


@dataclass
class BatchConfig:
    """Configuration for a concurrent batch run."""

    runs: int = DEFAULT_RUNS
    page_url: str = DEFAULT_RESULTS_PAGE
    expected_rows: int = DEFAULT_EXPECTED_ROWS
    wait_timeout: float = DEFAULT_WAIT_TIMEOUT
    browser: str = DEFAULT_BROWSER
    headless: bool = True
    policy: FailurePolicy = FailurePolicy.SKIP
