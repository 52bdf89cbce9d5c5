"""Shared fixtures: fake HTTP transports for the bucket and benchmark server."""

from __future__ import annotations

from typing import Callable, Optional

import httpx
import pytest

from bucketperf.config import LATENCY_HEADER

SERVER_URL = "https://bench.example.test"


class FakeBackend:
    """Serves bucket objects and server downloads, recording every request."""

    def __init__(
        self,
        latency_header: Optional[str] = "12.5",
        bucket_status: int = 200,
        server_status: int = 200,
        bucket_error: Optional[Exception] = None,
    ):
        self.latency_header = latency_header
        self.bucket_status = bucket_status
        self.server_status = server_status
        self.bucket_error = bucket_error
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "storage.googleapis.com":
            if self.bucket_error is not None:
                raise self.bucket_error
            return httpx.Response(self.bucket_status, content=b"x" * 64)

        headers = {}
        if self.latency_header is not None:
            headers[LATENCY_HEADER] = self.latency_header
        return httpx.Response(self.server_status, headers=headers, content=b"x" * 64)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def make_backend() -> Callable[..., FakeBackend]:
    return FakeBackend
