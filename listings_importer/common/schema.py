"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from listings_importer.common.errors import ConfigError


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive_int(value, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive integer")


def _assert_positive_number(value, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive number")


def validate_importer_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"hubspot", "feed", "import", "retry"}
    _assert_required_keys(cfg, top_required, "importer config")
    _assert_no_unknown_keys(cfg, top_required, "importer config", allow_unknown)

    hubspot_keys = {"base_url", "object_type", "identifier_property", "ensure_properties", "rate_per_sec"}
    _assert_required_keys(cfg["hubspot"], {"base_url", "object_type", "identifier_property"}, "hubspot")
    _assert_no_unknown_keys(cfg["hubspot"], hubspot_keys, "hubspot", allow_unknown)
    if not str(cfg["hubspot"]["identifier_property"] or "").strip():
        raise ConfigError("hubspot.identifier_property must be a non-empty string")
    if "rate_per_sec" in cfg["hubspot"]:
        _assert_positive_number(cfg["hubspot"]["rate_per_sec"], "hubspot.rate_per_sec")

    feed_keys = {"url", "file_path", "wrapper_keys", "timeout_seconds"}
    _assert_required_keys(cfg["feed"], {"wrapper_keys", "timeout_seconds"}, "feed")
    _assert_no_unknown_keys(cfg["feed"], feed_keys, "feed", allow_unknown)
    if not isinstance(cfg["feed"]["wrapper_keys"], list):
        raise ConfigError("feed.wrapper_keys must be a list")
    _assert_positive_number(cfg["feed"]["timeout_seconds"], "feed.timeout_seconds")

    import_keys = {"batch_size", "warning_example_cap", "max_workers", "dry_run"}
    _assert_required_keys(cfg["import"], {"batch_size", "warning_example_cap"}, "import")
    _assert_no_unknown_keys(cfg["import"], import_keys, "import", allow_unknown)
    _assert_positive_int(cfg["import"]["batch_size"], "import.batch_size")
    _assert_positive_int(cfg["import"]["warning_example_cap"], "import.warning_example_cap")
    if "max_workers" in cfg["import"]:
        _assert_positive_int(cfg["import"]["max_workers"], "import.max_workers")

    retry_keys = {"max_attempts", "multiplier", "max_wait"}
    _assert_required_keys(cfg["retry"], retry_keys, "retry")
    _assert_no_unknown_keys(cfg["retry"], retry_keys, "retry", allow_unknown)
    _assert_positive_int(cfg["retry"]["max_attempts"], "retry.max_attempts")

    return cfg
