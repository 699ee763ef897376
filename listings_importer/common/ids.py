"""Run identifier helpers."""

from __future__ import annotations

from datetime import datetime, timezone

RUN_ID_PREFIX = "import"


def generate_run_id(now: datetime | None = None) -> str:
    """Sortable run id such as ``import-20240115T143045123456Z``."""
    now = now or datetime.now(tz=timezone.utc)
    return f"{RUN_ID_PREFIX}-{now.astimezone(timezone.utc):%Y%m%dT%H%M%S%fZ}"
