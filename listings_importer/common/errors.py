"""Domain errors and failure typing."""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for importer failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration. Aborts the run."""

    error_code = "CONFIG_ERROR"


class StageError(PipelineError):
    """Raised for stage failures such as an unreachable or malformed feed."""

    error_code = "STAGE_ERROR"


class SkippableRecordError(PipelineError):
    """A single record failed; the rest of the batch continues."""

    error_code = "RECORD_ERROR"

    def __init__(self, message: str, external_listing_id: str | None = None) -> None:
        super().__init__(message)
        self.external_listing_id = external_listing_id
