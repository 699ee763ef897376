"""Per-record upsert with failure isolation and chunked progress reporting."""

from __future__ import annotations

import logging
from typing import Any, Iterator, Mapping, Protocol, Sequence

from listings_importer.common.models import CanonicalRecord, CreateOperation, Operation, UpsertTotals
from listings_importer.pipeline.reconcile import build_operation

IDENTIFIER_FIELD = "external_listing_id"


class ListingStore(Protocol):
    def lookup_by_identifier(self, identifier: str) -> Mapping[str, Any] | None: ...

    def submit(self, operation: Operation) -> Mapping[str, Any]: ...


def _record_failure(
    totals: UpsertTotals,
    identifier: str,
    stage: str,
    exc: Exception,
    logger: logging.Logger | None,
) -> None:
    totals.failed += 1
    totals.errors.append({"external_listing_id": identifier, "stage": stage, "error": str(exc)})
    if logger is not None:
        logger.error(
            f"Failed to upsert listing {identifier} during {stage}: {exc}",
            extra={
                "event": "UPSERT_FAIL",
                "status": "error",
                "stage": stage,
                "external_listing_id": identifier,
                "error_code": getattr(exc, "error_code", "UNEXPECTED_ERROR"),
            },
        )


def upsert_all(
    records: Sequence[CanonicalRecord],
    store: ListingStore,
    *,
    logger: logging.Logger | None = None,
) -> UpsertTotals:
    """Upsert each record independently.

    A record with no identifier is skipped without touching the tallies; any
    lookup or submit failure counts once as ``failed`` and never stops the
    remaining records.
    """
    totals = UpsertTotals()
    for record in records:
        identifier = record.get(IDENTIFIER_FIELD)
        if not identifier:
            continue

        try:
            existing = store.lookup_by_identifier(identifier)
        except Exception as exc:
            _record_failure(totals, identifier, "lookup", exc, logger)
            continue

        try:
            operation = build_operation(record, existing)
            store.submit(operation)
        except Exception as exc:
            _record_failure(totals, identifier, "submit", exc, logger)
            continue

        if isinstance(operation, CreateOperation):
            totals.created += 1
        else:
            totals.updated += 1
    return totals


def chunked(values: Sequence[CanonicalRecord], size: int) -> Iterator[Sequence[CanonicalRecord]]:
    for i in range(0, len(values), size):
        yield values[i : i + size]


def upsert_in_chunks(
    records: Sequence[CanonicalRecord],
    store: ListingStore,
    *,
    batch_size: int,
    logger: logging.Logger | None = None,
    run_id: str | None = None,
) -> UpsertTotals:
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")

    totals = UpsertTotals()
    chunk_count = (len(records) + batch_size - 1) // batch_size
    for index, chunk in enumerate(chunked(records, batch_size), start=1):
        label = f"{index}/{chunk_count}"
        if logger is not None:
            logger.info(
                f"Processing chunk {label}",
                extra={"event": "CHUNK_START", "status": "ok", "run_id": run_id, "chunk": label, "rows_in": len(chunk)},
            )
        result = upsert_all(chunk, store, logger=logger)
        totals.merge(result)
        if logger is not None:
            logger.info(
                f"Chunk {label} completed: created={result.created} updated={result.updated} failed={result.failed}",
                extra={
                    "event": "CHUNK_END",
                    "status": "ok" if result.failed == 0 else "partial",
                    "run_id": run_id,
                    "chunk": label,
                    "rows_out": result.created + result.updated,
                },
            )
    return totals
