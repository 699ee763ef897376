"""End-to-end import run: fetch, transform, reconcile, report."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Callable

from listings_importer.common.config_loader import ImporterSettings
from listings_importer.common.logging import log_event
from listings_importer.common.models import ImportResult, UpsertTotals
from listings_importer.common.time_utils import utc_today_iso
from listings_importer.hubspot.properties import LISTINGS_PROPERTIES
from listings_importer.pipeline.batch import ListingStore, upsert_in_chunks
from listings_importer.pipeline.reports import write_run_summary
from listings_importer.pipeline.transform import transform_listings
from listings_importer.pipeline.warnings import WarningAggregator

FeedLoader = Callable[[], list[Any]]


def run_import(
    settings: ImporterSettings,
    *,
    store: ListingStore,
    load_feed: FeedLoader,
    logger: logging.Logger,
    run_id: str,
    data_dir: Path | None = None,
) -> ImportResult:
    started = time.monotonic()
    log_event(logger, "import start", run_id=run_id, stage="import", event="RUN_START", status="ok")

    if settings.ensure_properties and not settings.dry_run:
        if hasattr(store, "ensure_object"):
            store.ensure_object()
        if hasattr(store, "ensure_properties"):
            store.ensure_properties(LISTINGS_PROPERTIES)

    raw_listings = load_feed()
    log_event(
        logger,
        f"Fetched {len(raw_listings)} listings from feed",
        run_id=run_id,
        stage="fetch",
        event="FEED_FETCHED",
        status="ok",
        rows_out=len(raw_listings),
    )

    warnings = WarningAggregator(example_cap=settings.warning_example_cap, logger=logger)
    records, transform_failures = transform_listings(
        raw_listings, warnings, logger=logger, max_workers=settings.max_workers
    )
    log_event(
        logger,
        f"Transformed {len(records)} listings, {len(transform_failures)} failed",
        run_id=run_id,
        stage="transform",
        event="TRANSFORM_DONE",
        status="ok",
        rows_in=len(raw_listings),
        rows_out=len(records),
    )
    if not records:
        log_event(
            logger,
            "No valid listings to import after transformation",
            level="WARNING",
            run_id=run_id,
            stage="transform",
            event="NO_RECORDS",
            status="warning",
        )

    totals = UpsertTotals(failed=len(transform_failures), errors=list(transform_failures))
    totals.merge(upsert_in_chunks(records, store, batch_size=settings.batch_size, logger=logger, run_id=run_id))
    warnings.emit(logger, run_id=run_id, stage="transform")

    result = ImportResult(
        run_id=run_id,
        fetched=len(raw_listings),
        transformed=len(records),
        created=totals.created,
        updated=totals.updated,
        failed=totals.failed,
        errors=totals.errors,
        warnings=warnings.as_dict(),
        duration_seconds=round(time.monotonic() - started, 3),
        dry_run=settings.dry_run,
        transform_failed=len(transform_failures),
    )

    if data_dir is not None:
        write_run_summary(data_dir, result, run_date=utc_today_iso())

    log_event(
        logger,
        f"Import completed: created={result.created} updated={result.updated} failed={result.failed}",
        level="INFO" if result.success else "ERROR",
        run_id=run_id,
        stage="import",
        event="RUN_END",
        status="ok" if result.success else "partial",
        rows_in=result.transformed,
        rows_out=result.created + result.updated,
        duration_ms=int(result.duration_seconds * 1000),
    )
    return result
