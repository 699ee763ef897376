"""Loose type coercion for feed values. Never raises; bad input becomes None."""

from __future__ import annotations

import math
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from listings_importer.common.constants import (
    EPOCH_SECONDS_CUTOFF,
    MAX_REASONABLE_YEAR,
    MIN_REASONABLE_YEAR,
    MS_PER_DAY,
)
from listings_importer.pipeline.warnings import WarningAggregator

DATETIME = "datetime"
DATE_ONLY = "date-only"

TRUTHY_STRINGS = {"true", "1", "yes"}
REJECTED_DATE_STRINGS = {"", "null", "undefined"}
FALLBACK_DATE_FORMATS = ("%m/%d/%Y", "%Y/%m/%d", "%m/%d/%Y %H:%M:%S", "%Y-%m-%d %H:%M:%S")

_NUMERIC_PREFIX_RE = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INFINITY_RE = re.compile(r"^\s*([+-]?)Infinity")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_MS = timedelta(milliseconds=1)


def to_number(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            # Integers beyond float range saturate to infinity.
            return math.inf if value > 0 else -math.inf
        return None if math.isnan(number) else number
    text = str(value)
    match = _NUMERIC_PREFIX_RE.match(text)
    if match:
        try:
            return float(match.group(0))
        except ValueError:
            return None
    infinity = _INFINITY_RE.match(text)
    if infinity:
        return -math.inf if infinity.group(1) == "-" else math.inf
    return None


def to_boolean(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in TRUTHY_STRINGS
    if isinstance(value, (int, float)):
        return value != 0
    return bool(value)


def to_text(value: Any, warnings: WarningAggregator | None = None) -> str | None:
    """Render a scalar feed value for a string property.

    Booleans render as ``"true"``/``"false"`` and integral floats without a
    fractional part. Objects and arrays are dropped with a warning.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list, tuple)):
        _track(warnings, "invalid_string_value", type(value).__name__)
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _track(warnings: WarningAggregator | None, category: str, example: Any) -> None:
    if warnings is not None:
        warnings.track(category, example)


def _parse_date_string(text: str) -> datetime | None:
    candidate = text.strip()
    if candidate.endswith(("Z", "z")):
        candidate = candidate[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        parsed = None
    if parsed is None:
        for fmt in FALLBACK_DATE_FORMATS:
            try:
                parsed = datetime.strptime(candidate, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _truncate_to_utc_day(epoch_ms: int) -> int:
    return epoch_ms - (epoch_ms % MS_PER_DAY)


def to_timestamp(value: Any, mode: str = DATETIME, warnings: WarningAggregator | None = None) -> int | None:
    """Convert a feed date value to epoch milliseconds.

    Numbers below 10,000,000,000 are epoch seconds, larger numbers epoch
    milliseconds. Strings are parsed as ISO 8601 (naive values read as UTC)
    and must fall between 1900 and 2100. With ``mode="date-only"`` the result
    is truncated to 00:00:00.000 UTC of the same UTC calendar day.
    """
    if not value:
        return None

    try:
        if isinstance(value, bool):
            _track(warnings, "unsupported_date_type", type(value).__name__)
            return None

        if isinstance(value, (int, float)):
            if isinstance(value, float) and not math.isfinite(value):
                _track(warnings, "invalid_date", value)
                return None
            epoch_ms = int(value * 1000 if value < EPOCH_SECONDS_CUTOFF else value)
            # Validates that the instant is representable.
            datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)
        elif isinstance(value, str):
            if value.strip() in REJECTED_DATE_STRINGS:
                return None
            parsed = _parse_date_string(value)
            if parsed is None:
                _track(warnings, "invalid_date", value)
                return None
            if parsed.year < MIN_REASONABLE_YEAR or parsed.year > MAX_REASONABLE_YEAR:
                _track(warnings, "date_out_of_range", value)
                return None
            epoch_ms = (parsed - EPOCH) // ONE_MS
        else:
            _track(warnings, "unsupported_date_type", type(value).__name__)
            return None
    except (OverflowError, OSError, TypeError, ValueError) as exc:
        _track(warnings, "date_parse_error", f"{value} ({exc})")
        return None

    if mode == DATE_ONLY:
        return _truncate_to_utc_day(epoch_ms)
    return epoch_ms
