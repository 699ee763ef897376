"""Data models used across the importer."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Mapping, Union

CanonicalRecord = Mapping[str, Any]


@dataclass(frozen=True)
class CreateOperation:
    payload: dict[str, Any]

    @property
    def kind(self) -> str:
        return "create"


@dataclass(frozen=True)
class UpdateOperation:
    record_id: str
    payload: dict[str, Any]

    @property
    def kind(self) -> str:
        return "update"


Operation = Union[CreateOperation, UpdateOperation]


@dataclass
class UpsertTotals:
    created: int = 0
    updated: int = 0
    failed: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)

    def merge(self, other: "UpsertTotals") -> None:
        self.created += other.created
        self.updated += other.updated
        self.failed += other.failed
        self.errors.extend(other.errors)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ImportResult:
    run_id: str
    fetched: int
    transformed: int
    created: int
    updated: int
    failed: int
    errors: list[dict[str, Any]]
    warnings: dict[str, dict[str, Any]]
    duration_seconds: float
    dry_run: bool
    transform_failed: int = 0

    @property
    def success(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["success"] = self.success
        return payload
