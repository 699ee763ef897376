import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from listings_importer.common.errors import ConfigError, PipelineError, SkippableRecordError, StageError
from listings_importer.common.fs import read_json, write_json
from listings_importer.common.ids import generate_run_id
from listings_importer.common.logging import build_logger, close_logger, log_event, normalise_level
from listings_importer.common.models import ImportResult, UpsertTotals
from listings_importer.pipeline.reports import run_status, write_run_summary


def _result(**overrides):
    values = {
        "run_id": "import-test",
        "fetched": 3,
        "transformed": 2,
        "created": 1,
        "updated": 1,
        "failed": 0,
        "errors": [],
        "warnings": {"invalid_date": {"count": 2, "examples": ["x", "y"]}},
        "duration_seconds": 0.5,
        "dry_run": False,
    }
    values.update(overrides)
    return ImportResult(**values)


def test_generate_run_id_prefix():
    assert generate_run_id().startswith("import-")
    assert generate_run_id(datetime(2024, 1, 15, 14, 30, 45, 123456, tzinfo=timezone.utc)) == "import-20240115T143045123456Z"


def test_error_codes():
    assert issubclass(ConfigError, PipelineError)
    assert ConfigError.error_code == "CONFIG_ERROR"
    assert StageError.error_code == "STAGE_ERROR"
    assert SkippableRecordError.error_code == "RECORD_ERROR"


def test_normalise_level():
    assert normalise_level("warn") == "WARNING"
    assert normalise_level("debug") == "DEBUG"


def test_upsert_totals_merge():
    totals = UpsertTotals(created=1, errors=[{"external_listing_id": "A"}])
    totals.merge(UpsertTotals(updated=2, failed=1, errors=[{"external_listing_id": "B"}]))

    assert totals.to_dict() == {
        "created": 1,
        "updated": 2,
        "failed": 1,
        "errors": [{"external_listing_id": "A"}, {"external_listing_id": "B"}],
    }


def test_import_result_success_flag():
    assert _result().success is True
    assert _result(failed=1).success is False
    assert _result(failed=1).to_dict()["success"] is False


def test_run_status():
    assert run_status(_result()) == "success"
    assert run_status(_result(failed=1)) == "partial"
    assert run_status(_result(created=0, updated=0, failed=2)) == "error"


def test_write_run_summary(tmp_path: Path):
    path = write_run_summary(tmp_path, _result(), run_date="2024-01-15")

    assert path == tmp_path / "out" / "reports" / "import-test_summary.json"
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["status"] == "success"
    assert payload["totals"]["dropped"] == 1
    assert payload["warning_count"] == 2


def test_build_logger_writes_json_lines(tmp_path: Path):
    logger = build_logger("import-log-test", data_dir=tmp_path, level="WARN")
    log_event(logger, "ignored", level="INFO", event="NOISE")
    log_event(logger, "kept", level="WARN", run_id="import-log-test", event="CHUNK_END", chunk="1/1")
    close_logger(logger)

    lines = (tmp_path / "run_meta" / "import-log-test.log.jsonl").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    payload = json.loads(lines[0])
    assert payload["level"] == "WARNING"
    assert payload["event"] == "CHUNK_END"
    assert payload["chunk"] == "1/1"
    assert payload["message"] == "kept"
    assert payload["external_listing_id"] is None
    assert logger.level == logging.WARNING


def test_write_json_leaves_no_temp_file(tmp_path: Path):
    target = tmp_path / "out" / "payload.json"
    write_json(target, {"b": 1, "a": 2})
    write_json(target, {"a": 3})

    assert read_json(target) == {"a": 3}
    assert sorted(path.name for path in target.parent.iterdir()) == ["payload.json"]
