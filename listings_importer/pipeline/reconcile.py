"""Create/update payload rules for syncing canonical listings to HubSpot.

Creates send the full canonical record so the listing starts with a complete
baseline. Updates are limited to ``UPDATE_ALLOWLIST``: address and structure
fields belong to whichever system edited them after creation and must not be
overwritten by a re-import.
"""

from __future__ import annotations

from typing import Any, Mapping

from listings_importer.common.models import CreateOperation, Operation, UpdateOperation

CURRENT_PRICE_FIELD = "price"
LEGACY_PRICE_FIELD = "list_price"

UPDATE_ALLOWLIST = (
    CURRENT_PRICE_FIELD,
    "listing_status",
    "auction_status",
    "auction_start_date",
    "auction_end_date",
)


def prepare_update(canonical: Mapping[str, Any]) -> dict[str, Any]:
    payload = {
        field: canonical[field]
        for field in UPDATE_ALLOWLIST
        if field in canonical and canonical[field] is not None
    }
    if CURRENT_PRICE_FIELD in payload:
        payload[LEGACY_PRICE_FIELD] = None
    return payload


def prepare_create(canonical: Mapping[str, Any]) -> dict[str, Any]:
    return {
        field: value
        for field, value in canonical.items()
        if field != LEGACY_PRICE_FIELD and value is not None
    }


def build_operation(canonical: Mapping[str, Any], existing: Mapping[str, Any] | None) -> Operation:
    if existing is not None:
        return UpdateOperation(record_id=str(existing["id"]), payload=prepare_update(canonical))
    return CreateOperation(payload=prepare_create(canonical))
