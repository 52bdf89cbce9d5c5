"""Tests for trial validation and orchestration."""

from __future__ import annotations

import asyncio
import re

import pytest

from bucketperf import trial as trial_module
from bucketperf.models import TrialConfig
from bucketperf.trial import (
    InvalidTrialParameter,
    bucket_name_for,
    run_matrix,
    run_trial,
    validate_request,
)
from tests.conftest import SERVER_URL

FIXED_POINT = re.compile(r"^-?\d+\.\d{3}$")
CONFIG = TrialConfig(server_url=SERVER_URL)


def _no_client(config):
    raise AssertionError("no HTTP client should be created for invalid input")


class TestValidation:

    @pytest.mark.parametrize("object_id", ["1mib.txt", "", "2MIB.TXT", "../2mib.txt"])
    def test_unknown_object_rejected_without_io(self, object_id, backend, monkeypatch):
        monkeypatch.setattr(trial_module, "build_client", _no_client)
        with pytest.raises(InvalidTrialParameter) as info:
            asyncio.run(run_trial(object_id, "us-west1", CONFIG))
        assert info.value.parameter == "object"
        assert info.value.value == object_id
        assert "2mib.txt" in info.value.allowed
        assert backend.requests == []

    @pytest.mark.parametrize("region_id", ["mars-north1", "", "US-WEST1"])
    def test_unknown_region_rejected_without_io(self, region_id, backend):
        async def run():
            async with backend.client() as client:
                await run_trial("2mib.txt", region_id, CONFIG, client=client)

        with pytest.raises(InvalidTrialParameter) as info:
            asyncio.run(run())
        assert info.value.parameter == "region"
        assert "us-west1" in info.value.allowed
        assert backend.requests == []

    def test_invalid_parameter_is_value_error(self):
        with pytest.raises(ValueError, match="Invalid object"):
            validate_request("nope", "us-west1")

    def test_bucket_name(self):
        assert bucket_name_for("europe-west2") == "gcsrbpa-europe-west2"


class TestRunTrial:

    def test_record_shape(self, backend):
        async def run():
            async with backend.client() as client:
                return await run_trial("2mib.txt", "us-west1", CONFIG, client=client)

        record = asyncio.run(run())
        assert record.bucket_name == "gcsrbpa-us-west1"
        assert record.region == "us-west1"
        assert record.location == "Oregon"
        assert record.object_id == "2mib.txt"
        assert record.file_size_bytes == "2097152"
        assert record.time_taken_server_client_upstream == "12.500"
        assert record.error is None
        assert isinstance(record.percent_change, int)
        for value in (
            record.time_taken_client,
            record.time_taken_server,
            record.time_taken_server_network_hop,
            record.speed_bytes_per_sec,
            record.speed_mib_per_sec,
        ):
            assert FIXED_POINT.match(value), value

    def test_failed_measurement_still_yields_full_record(self, make_backend):
        backend = make_backend(latency_header="not-a-number")

        async def run():
            async with backend.client() as client:
                return await run_trial("64mib.txt", "asia-east1", CONFIG, client=client)

        record = asyncio.run(run())
        assert record.time_taken_client == "-1.000"
        assert record.time_taken_server == "-1.000"
        assert record.time_taken_server_client_upstream == "-1.000"
        assert record.time_taken_server_network_hop == "-1.000"
        assert record.speed_bytes_per_sec == "-1.000"
        assert record.speed_mib_per_sec == "-1.000"
        assert record.percent_change == -1
        assert record.file_size_bytes == "67108864"
        assert record.error

    def test_to_dict_field_names(self, backend):
        async def run():
            async with backend.client() as client:
                return await run_trial("256mib.txt", "us-east1", CONFIG, client=client)

        data = asyncio.run(run()).to_dict()
        assert list(data) == [
            "bucketName",
            "region",
            "location",
            "objectId",
            "timeTakenClient",
            "timeTakenServer",
            "timeTakenServerClientUpstream",
            "timeTakenServerNetworkHop",
            "percentChange",
            "fileSizeBytes",
            "speedBytesPerSec",
            "speedMiBPerSec",
        ]


class TestRunMatrix:

    def test_runs_pairs_in_order(self, backend):
        seen = []

        def on_progress(index, total, record):
            seen.append((index, total, record is not None))

        async def run():
            async with backend.client() as client:
                return await run_matrix(
                    ["2mib.txt", "64mib.txt"], ["us-west1", "europe-west2"],
                    CONFIG, on_progress, client=client,
                )

        records = asyncio.run(run())
        assert [(r.object_id, r.region) for r in records] == [
            ("2mib.txt", "us-west1"),
            ("2mib.txt", "europe-west2"),
            ("64mib.txt", "us-west1"),
            ("64mib.txt", "europe-west2"),
        ]
        assert len(backend.requests) == 8
        assert seen[0] == (0, 4, False)
        assert seen[-1] == (3, 4, True)

    def test_validates_everything_before_measuring(self, backend):
        async def run():
            async with backend.client() as client:
                await run_matrix(["2mib.txt"], ["us-west1", "nowhere"], CONFIG, client=client)

        with pytest.raises(InvalidTrialParameter):
            asyncio.run(run())
        assert backend.requests == []
