"""Per-batch data-quality warning counters with bounded example retention."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any

DEFAULT_EXAMPLE_CAP = 3
VERBOSE_HINT = "Run with --log-level DEBUG to see every data-quality warning."

WARNING_LABELS = {
    "invalid_state_code": "Invalid state code provided",
    "state_derivation_failed": "Could not derive state code",
    "invalid_auction_status": "Unrecognized auction status dropped",
    "invalid_listing_type": "Unrecognized listing type replaced by inferred type",
    "invalid_string_value": "Object or array dropped from text field",
    "invalid_date": "Invalid date value",
    "date_out_of_range": "Date out of reasonable range",
    "unsupported_date_type": "Unsupported date type",
    "date_parse_error": "Error parsing date",
    "transform_error": "Listing could not be transformed",
}


@dataclass
class WarningBucket:
    count: int = 0
    examples: list[str] = field(default_factory=list)


class WarningAggregator:
    """Counts warnings per category for one batch run.

    Each batch owns its own instance. The lock only makes a single batch safe
    to transform on several worker threads.
    """

    def __init__(self, example_cap: int = DEFAULT_EXAMPLE_CAP, logger: logging.Logger | None = None) -> None:
        self.example_cap = example_cap
        self.logger = logger
        self.buckets: dict[str, WarningBucket] = {}
        self.lock = threading.Lock()

    def track(self, category: str, example: Any) -> None:
        text = str(example)
        with self.lock:
            bucket = self.buckets.setdefault(category, WarningBucket())
            bucket.count += 1
            if len(bucket.examples) < self.example_cap:
                bucket.examples.append(text)
        if self.logger is not None:
            self.logger.debug(
                f"{label_for(category)}: {text}",
                extra={"event": "DATA_QUALITY", "status": "warning", "error_code": category},
            )

    def count(self, category: str) -> int:
        bucket = self.buckets.get(category)
        return bucket.count if bucket else 0

    def examples(self, category: str) -> list[str]:
        bucket = self.buckets.get(category)
        return list(bucket.examples) if bucket else []

    @property
    def total(self) -> int:
        return sum(bucket.count for bucket in self.buckets.values())

    def reset(self) -> None:
        with self.lock:
            self.buckets.clear()

    def summarize(self) -> list[str]:
        lines: list[str] = []
        for category in sorted(self.buckets):
            bucket = self.buckets[category]
            if bucket.count <= 0:
                continue
            quoted = ", ".join(f'"{example}"' for example in bucket.examples)
            if bucket.count > len(bucket.examples):
                quoted = f"{quoted}, ..." if quoted else "..."
            lines.append(f"{label_for(category)}: {bucket.count} (e.g. {quoted})")
        if lines:
            lines.append(VERBOSE_HINT)
        return lines

    def emit(self, logger: logging.Logger, **event_fields: Any) -> list[str]:
        lines = self.summarize()
        for line in lines:
            event = "DATA_QUALITY_HINT" if line == VERBOSE_HINT else "DATA_QUALITY"
            logger.warning(line, extra={"event": event, "status": "warning", **event_fields})
        return lines

    def as_dict(self) -> dict[str, dict[str, Any]]:
        return {
            category: {"count": bucket.count, "examples": list(bucket.examples)}
            for category, bucket in sorted(self.buckets.items())
        }


def label_for(category: str) -> str:
    return WARNING_LABELS.get(category, category.replace("_", " ").capitalize())
