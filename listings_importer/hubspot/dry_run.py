"""Store that records operations instead of sending them."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from listings_importer.common.models import CreateOperation, Operation


class DryRunStore:
    """Treats every listing as new, since nothing is looked up remotely."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger
        self.operations: list[Operation] = []

    def lookup_by_identifier(self, identifier: str) -> Mapping[str, Any] | None:
        return None

    def submit(self, operation: Operation) -> Mapping[str, Any]:
        self.operations.append(operation)
        identifier = operation.payload.get("external_listing_id") if isinstance(operation, CreateOperation) else operation.record_id
        if self.logger is not None:
            self.logger.info(
                f"[dry-run] would {operation.kind} listing {identifier} ({len(operation.payload)} properties)",
                extra={"event": "DRY_RUN", "status": "skipped", "external_listing_id": identifier},
            )
        return {"id": None, "properties": dict(operation.payload)}
