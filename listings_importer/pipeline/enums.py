"""Closed-vocabulary normalisers for state codes, auction status and listing type."""

from __future__ import annotations

import re
from typing import Any, Mapping

from listings_importer.common.constants import (
    AUCTION_STATUS_LABELS,
    AUCTION_STATUS_VALUES,
    LISTING_TYPE_LABELS,
    LISTING_TYPE_VALUES,
    US_STATE_NAME_TO_CODE,
    VALID_STATE_CODES,
)
from listings_importer.pipeline.aliases import STATE_CODE_ALIASES, STATE_NAME_ALIASES, resolve_first
from listings_importer.pipeline.warnings import WarningAggregator

_LABEL_SEPARATORS_RE = re.compile(r"[\s_\-/]+")


def derive_state_code(record: Mapping[str, Any], warnings: WarningAggregator | None = None) -> str | None:
    provided = resolve_first(record, *STATE_CODE_ALIASES)
    if provided:
        code = str(provided).strip().upper()
        if code in VALID_STATE_CODES:
            return code
        if warnings is not None:
            warnings.track("invalid_state_code", provided)

    state = resolve_first(record, *STATE_NAME_ALIASES)
    if not state:
        return None

    state_str = str(state).strip()
    if len(state_str) == 2 and state_str.upper() in VALID_STATE_CODES:
        return state_str.upper()

    code = US_STATE_NAME_TO_CODE.get(state_str.lower())
    if code:
        return code

    if warnings is not None:
        warnings.track("state_derivation_failed", state_str)
    return None


def normalize_auction_status(raw: Any, warnings: WarningAggregator | None = None) -> str | None:
    if raw is None or raw == "":
        return None
    if raw in AUCTION_STATUS_VALUES:
        return raw
    mapped = AUCTION_STATUS_LABELS.get(raw) if isinstance(raw, str) else None
    if mapped is not None:
        return mapped
    if warnings is not None:
        warnings.track("invalid_auction_status", raw)
    return None


def _label_key(text: str) -> str:
    return _LABEL_SEPARATORS_RE.sub(" ", text.strip().lower()).strip()


_LISTING_TYPES_BY_KEY = {
    **{_label_key(value): value for value in LISTING_TYPE_VALUES},
    **LISTING_TYPE_LABELS,
}


def normalize_listing_type(raw: Any, warnings: WarningAggregator | None = None) -> str | None:
    """Map a feed property type onto the ``hs_listing_type`` vocabulary.

    Unrecognised values are tracked as ``invalid_listing_type`` and return
    None so the caller can infer the type from the structure fields.
    """
    if raw is None or raw == "":
        return None
    if raw in LISTING_TYPE_VALUES:
        return raw
    mapped = _LISTING_TYPES_BY_KEY.get(_label_key(raw)) if isinstance(raw, str) else None
    if mapped is not None:
        return mapped
    if warnings is not None:
        warnings.track("invalid_listing_type", raw)
    return None
