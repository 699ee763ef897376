from pathlib import Path

import pytest

import listings_importer.cli as cli
from listings_importer.cli import parse_args, run_command
from listings_importer.common.constants import EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS
from listings_importer.common.fs import read_json
from listings_importer.common.http import HttpRequestError

FIXTURE = Path(__file__).resolve().parents[1] / "fixtures" / "sample_feed.json"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("HUBSPOT_ACCESS_TOKEN", "HUBSPOT_API_TOKEN", "FEED_URL", "FEED_FILE_PATH", "DRY_RUN", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class FailingCreateStore:
    def __init__(self, *_args, **_kwargs):
        pass

    def ensure_properties(self, definitions):
        return []

    def lookup_by_identifier(self, identifier):
        return None

    def submit(self, operation):
        if operation.payload["external_listing_id"] == "C-300":
            raise HttpRequestError("rejected", status_code=400)
        return {"id": "1"}


@pytest.mark.integration
def test_cli_dry_run_generates_summary_and_log(tmp_path: Path):
    data_dir = tmp_path / "data"
    args = parse_args(
        ["--file", str(FIXTURE), "--dry-run", "--config-dir", "config", "--data-dir", str(data_dir), "--run-id", "import-test"]
    )

    exit_code = run_command(args)

    assert exit_code == EXIT_SUCCESS
    summary = read_json(data_dir / "out" / "reports" / "import-test_summary.json")
    assert summary["dry_run"] is True
    assert summary["totals"]["created"] == 3
    assert (data_dir / "run_meta" / "import-test.log.jsonl").exists()


@pytest.mark.integration
def test_cli_partial_failure_exit_code(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("HUBSPOT_ACCESS_TOKEN", "pat-test")
    monkeypatch.setattr(cli, "HubSpotListingsStore", FailingCreateStore)
    args = parse_args(["--file", str(FIXTURE), "--config-dir", "config", "--data-dir", str(tmp_path), "--run-id", "import-partial"])

    assert run_command(args) == EXIT_PARTIAL


@pytest.mark.integration
def test_cli_missing_feed_file_is_hard_failure(tmp_path: Path):
    args = parse_args(
        ["--file", str(tmp_path / "missing.json"), "--dry-run", "--config-dir", "config", "--data-dir", str(tmp_path)]
    )

    assert run_command(args) == EXIT_HARD_FAIL
