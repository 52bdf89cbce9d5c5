"""Latency decomposition and result formatting.

Splits the server-observed download time into the server's own upstream
fetch and the network hop between server and caller, and derives the
client-side transfer speed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from bucketperf.config import DEFAULT_TIME_TAKEN, FLOAT_ROUND_DIGITS
from bucketperf.models import Measurement, TimingTriple


@dataclass(frozen=True)
class Decomposition:
    """Quantities derived from one timing triple."""

    network_hop: Measurement
    percent_change: int
    speed_bps: Measurement
    speed_mibps: Measurement


def network_hop(server: Measurement, server_client_latency: Measurement) -> Measurement:
    """Server total minus the server's upstream fetch.  May be negative."""
    if not server.ok:
        return server
    if not server_client_latency.ok:
        return server_client_latency
    return Measurement.measured(server.value - server_client_latency.value)


def percent_change(a: float, b: float) -> int:
    """Floor-truncated change from *a* (client) to *b* (server), in percent.

    Zero operands are special-cased instead of dividing by zero, so the
    result is not symmetric in its arguments.
    """
    if b != 0:
        if a != 0:
            percent = (b - a) / a * 100
        else:
            percent = b * 100
    else:
        percent = -a * 100
    return math.floor(percent)


def speed(size: float, duration_ms: Measurement) -> Measurement:
    """*size* units per second over *duration_ms*.

    Zero, NaN and infinite results fall back to a failed measurement.
    """
    if not duration_ms.ok:
        return duration_ms
    seconds = duration_ms.value / 1000
    try:
        value = size / seconds
    except ZeroDivisionError:
        return Measurement.failed("zero elapsed time")
    if value == 0 or not math.isfinite(value):
        return Measurement.failed(f"undefined speed: {value!r}")
    return Measurement.measured(value)


def decompose(triple: TimingTriple, size_bytes: int, size_mib: float) -> Decomposition:
    if triple.client.ok and triple.server.ok:
        change = percent_change(triple.client.value, triple.server.value)
    else:
        change = int(DEFAULT_TIME_TAKEN)

    return Decomposition(
        network_hop=network_hop(triple.server, triple.server_client_latency),
        percent_change=change,
        speed_bps=speed(size_bytes, triple.client),
        speed_mibps=speed(size_mib, triple.client),
    )


def format_value(value: Measurement | float | int | str) -> str:
    """Fixed-point string with FLOAT_ROUND_DIGITS digits; strings pass through."""
    if isinstance(value, str):
        return value
    if isinstance(value, Measurement):
        value = value.or_sentinel()
    return f"{value:.{FLOAT_ROUND_DIGITS}f}"
