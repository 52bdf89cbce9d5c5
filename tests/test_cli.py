"""Tests for the click command-line interface."""

from __future__ import annotations

import json

from click.testing import CliRunner

from bucketperf import harness, trial
from bucketperf.cli import main
from bucketperf.harness import BatchFailed
from bucketperf.models import BatchResult, ResultRecord, ScrapedRow, UnitOutcome


def _record() -> ResultRecord:
    return ResultRecord(
        bucket_name="gcsrbpa-us-west1",
        region="us-west1",
        location="Oregon",
        object_id="2mib.txt",
        time_taken_client="10.000",
        time_taken_server="15.000",
        time_taken_server_client_upstream="4.000",
        time_taken_server_network_hop="11.000",
        percent_change=50,
        file_size_bytes="2097152",
        speed_bytes_per_sec="209715200.000",
        speed_mib_per_sec="200.000",
    )


class TestTrialCommand:

    def test_invalid_object_exits_with_error(self):
        result = CliRunner().invoke(main, ["trial", "3mib.txt", "us-west1"])
        assert result.exit_code == 1
        assert "Invalid object" in result.output

    def test_json_output(self, monkeypatch):
        captured = {}

        async def fake_run_trial(object_id, region_id, config):
            captured["args"] = (object_id, region_id, config.server_url, config.http2)
            return _record()

        monkeypatch.setattr(trial, "run_trial", fake_run_trial)
        result = CliRunner().invoke(
            main, ["trial", "2mib.txt", "us-west1", "--json", "--http1", "--server-url", "https://srv"],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data[0]["timeTakenServerNetworkHop"] == "11.000"
        assert captured["args"] == ("2mib.txt", "us-west1", "https://srv", False)

    def test_server_url_from_environment(self, monkeypatch):
        captured = {}

        async def fake_run_trial(object_id, region_id, config):
            captured["url"] = config.server_url
            return _record()

        monkeypatch.setattr(trial, "run_trial", fake_run_trial)
        result = CliRunner().invoke(
            main, ["trial", "2mib.txt", "us-west1", "--json"],
            env={"BUCKETPERF_SERVER_URL": "https://env-server"},
        )
        assert result.exit_code == 0, result.output
        assert captured["url"] == "https://env-server"


class TestBatchCommand:

    def test_writes_csv(self, monkeypatch, tmp_path):
        async def fake_run_batch(runs, config, progress_callback=None):
            assert runs == 2
            assert config.policy.value == "skip"
            row = ScrapedRow("t", 1, ["us-west1"])
            return BatchResult(rows=[row], outcomes=[UnitOutcome(1, [row]), UnitOutcome(2, error="x")])

        monkeypatch.setattr(harness, "run_batch", fake_run_batch)
        out = tmp_path / "runs.csv"
        result = CliRunner().invoke(main, ["batch", "-n", "2", "-q", "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert out.read_text().splitlines()[1].startswith("t,1,us-west1")

    def test_abort_policy_failure_exits_nonzero(self, monkeypatch):
        async def fake_run_batch(runs, config, progress_callback=None):
            raise BatchFailed(BatchResult(outcomes=[UnitOutcome(1, error="timed out")]))

        monkeypatch.setattr(harness, "run_batch", fake_run_batch)
        result = CliRunner().invoke(main, ["batch", "-n", "1", "-q", "--policy", "abort"])
        assert result.exit_code == 1
        assert "runs failed" in result.output


def test_regions_lists_catalog():
    result = CliRunner().invoke(main, ["regions"])
    assert result.exit_code == 0
    assert "us-west1" in result.output


class TestBatchWarnings:

    def test_partial_failure_is_reported(self, monkeypatch, tmp_path):
        async def fake_run_batch(runs, config, progress_callback=None):
            row = ScrapedRow("t", 1, ["us-west1"])
            return BatchResult(rows=[row], outcomes=[UnitOutcome(1, [row]), UnitOutcome(2, error="x")])

        monkeypatch.setattr(harness, "run_batch", fake_run_batch)
        result = CliRunner().invoke(main, ["batch", "-n", "2", "-o", str(tmp_path / "runs.csv")])
        assert result.exit_code == 0, result.output
        assert "1 of 2 runs failed" in result.output

    def test_browser_choices_come_from_registry(self):
        result = CliRunner().invoke(main, ["batch", "--browser", "netscape"])
        assert result.exit_code == 2
        assert "chrome" in result.output and "firefox" in result.output
