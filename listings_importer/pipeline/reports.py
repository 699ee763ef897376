"""Run report aggregation."""

from __future__ import annotations

from pathlib import Path

from listings_importer.common.fs import write_json
from listings_importer.common.models import ImportResult


def run_status(result: ImportResult) -> str:
    if result.failed > 0 and result.created + result.updated == 0:
        return "error"
    if result.failed > 0:
        return "partial"
    return "success"


def write_run_summary(data_dir: Path, result: ImportResult, *, run_date: str) -> Path:
    warning_count = sum(int(bucket.get("count", 0)) for bucket in result.warnings.values())
    payload = {
        "run_id": result.run_id,
        "run_date": run_date,
        "status": run_status(result),
        "dry_run": result.dry_run,
        "totals": {
            "fetched": result.fetched,
            "transformed": result.transformed,
            "dropped": max(result.fetched - result.transformed - result.transform_failed, 0),
            "transform_failed": result.transform_failed,
            "created": result.created,
            "updated": result.updated,
            "failed": result.failed,
        },
        "warning_count": warning_count,
        "warnings": result.warnings,
        "error_count": len(result.errors),
        "errors": result.errors,
        "duration_seconds": result.duration_seconds,
    }
    summary_path = data_dir / "out" / "reports" / f"{result.run_id}_summary.json"
    write_json(summary_path, payload)
    return summary_path
