"""Transform raw feed listings into canonical HubSpot listing records."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from listings_importer.common.constants import LISTING_TYPE_BY_CATEGORY
from listings_importer.common.errors import SkippableRecordError
from listings_importer.common.models import CanonicalRecord
from listings_importer.pipeline.aliases import (
    AUCTION_STATUS,
    BOOLEAN,
    DATE,
    FIELD_SPECS,
    FIELD_SPECS_BY_NAME,
    LISTING_TYPE,
    NUMBER,
    STRING,
    FieldSpec,
    resolve_field,
)
from listings_importer.pipeline.coerce import DATE_ONLY, to_boolean, to_number, to_text, to_timestamp
from listings_importer.pipeline.derived import classify_property_type, synthesize_display_name
from listings_importer.pipeline.enums import derive_state_code, normalize_auction_status, normalize_listing_type
from listings_importer.pipeline.warnings import WarningAggregator

IDENTIFIER_FIELD = "external_listing_id"
TRANSFORM_STAGE = "transform"

TransformFailure = dict[str, Any]


def _coerce_field(spec: FieldSpec, value: Any, warnings: WarningAggregator | None) -> Any:
    if spec.kind == STRING:
        return to_text(value, warnings)
    if spec.kind == NUMBER:
        return to_number(value)
    if spec.kind == BOOLEAN:
        return to_boolean(value)
    if spec.kind == DATE:
        return to_timestamp(value, DATE_ONLY, warnings)
    if spec.kind == AUCTION_STATUS:
        return normalize_auction_status(value, warnings)
    if spec.kind == LISTING_TYPE:
        return normalize_listing_type(value, warnings)
    raise ValueError(f"Unknown field kind: {spec.kind}")


def _resolve_identifier(raw: Mapping[str, Any]) -> str | None:
    value = resolve_field(raw, FIELD_SPECS_BY_NAME[IDENTIFIER_FIELD])
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    identifier = str(value).strip()
    return identifier or None


def _build_record(raw: Mapping[str, Any], identifier: str, warnings: WarningAggregator | None) -> dict[str, Any]:
    out: dict[str, Any] = {IDENTIFIER_FIELD: identifier}

    for spec in FIELD_SPECS:
        if spec.name == IDENTIFIER_FIELD:
            continue
        value = resolve_field(raw, spec)
        if value is None:
            if spec.default is not None:
                out[spec.name] = spec.default
            continue
        coerced = _coerce_field(spec, value, warnings)
        if coerced is not None:
            out[spec.name] = coerced

    state_code = derive_state_code(raw, warnings)
    if state_code:
        out["state_code"] = state_code

    # Derived fields depend on the resolved address and structure values.
    if not out.get("hs_name"):
        out["hs_name"] = synthesize_display_name(out)
    if not out.get("hs_listing_type"):
        category = classify_property_type(
            {
                "squareFootage": out.get("hs_square_footage"),
                "bedrooms": out.get("hs_bedrooms"),
                "bathrooms": out.get("hs_bathrooms"),
                "lotSize": out.get("hs_lot_size"),
            }
        )
        out["hs_listing_type"] = LISTING_TYPE_BY_CATEGORY[category]
    return out


def transform_listing(raw: Mapping[str, Any], warnings: WarningAggregator | None = None) -> CanonicalRecord | None:
    """Return the canonical record for one feed entry, or None without an identifier.

    Any failure after the identifier is known is raised as
    ``SkippableRecordError`` carrying that identifier.
    """
    identifier = _resolve_identifier(raw)
    if identifier is None:
        return None
    try:
        out = _build_record(raw, identifier, warnings)
    except Exception as exc:
        raise SkippableRecordError(f"{type(exc).__name__}: {exc}", external_listing_id=identifier) from exc
    return MappingProxyType(out)


def _safe_transform(
    index: int,
    raw: Any,
    warnings: WarningAggregator,
    logger: logging.Logger | None,
) -> tuple[CanonicalRecord | None, TransformFailure | None]:
    try:
        if not isinstance(raw, Mapping):
            raise SkippableRecordError(f"listing at index {index} is {type(raw).__name__}, not an object")
        return transform_listing(raw, warnings), None
    except Exception as exc:
        identifier = getattr(exc, "external_listing_id", None)
        warnings.track("transform_error", f"index {index}: {exc}")
        if logger is not None:
            logger.error(
                f"Error transforming listing at index {index}: {exc}",
                extra={
                    "event": "TRANSFORM_FAIL",
                    "status": "error",
                    "error_code": SkippableRecordError.error_code,
                    "external_listing_id": identifier,
                },
            )
        if identifier is None:
            return None, None
        return None, {"external_listing_id": identifier, "stage": TRANSFORM_STAGE, "error": str(exc)}


def transform_listings(
    raw_records: Iterable[Any],
    warnings: WarningAggregator,
    *,
    logger: logging.Logger | None = None,
    max_workers: int = 1,
) -> tuple[list[CanonicalRecord], list[TransformFailure]]:
    """Transform a batch into ``(records, failures)``.

    Entries without an identifier are dropped. A listing with an identifier
    that fails to transform becomes a failure with stage ``transform``.
    Output order follows input order regardless of ``max_workers``.
    """
    items = list(enumerate(raw_records))
    if max_workers > 1 and len(items) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(lambda item: _safe_transform(item[0], item[1], warnings, logger), items))
    else:
        results = [_safe_transform(index, raw, warnings, logger) for index, raw in items]
    records = [record for record, _ in results if record is not None]
    failures = [failure for _, failure in results if failure is not None]
    return records, failures
