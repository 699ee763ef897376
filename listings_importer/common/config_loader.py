"""Configuration loading and validation."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

from listings_importer.common.errors import ConfigError
from listings_importer.common.fs import read_yaml
from listings_importer.common.http import RetryConfig
from listings_importer.common.schema import validate_importer_config

CONFIG_FILENAME = "importer.yml"
TOKEN_ENV_VARS = ("HUBSPOT_ACCESS_TOKEN", "HUBSPOT_API_TOKEN")
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = {"DEBUG", "INFO", "WARN", "WARNING", "ERROR"}


@dataclass(frozen=True)
class ImporterSettings:
    access_token: str | None
    base_url: str
    object_type: str
    identifier_property: str
    ensure_properties: bool
    rate_per_sec: float
    feed_url: str | None
    feed_file_path: str | None
    wrapper_keys: tuple[str, ...]
    feed_timeout_seconds: float
    batch_size: int
    warning_example_cap: int
    max_workers: int
    dry_run: bool
    retry: RetryConfig
    log_level: str
    config_warnings: tuple[str, ...] = ()

    def require_token(self) -> str:
        if not self.access_token:
            raise ConfigError("HUBSPOT_ACCESS_TOKEN or HUBSPOT_API_TOKEN is required")
        return self.access_token

    def with_overrides(self, **changes: Any) -> "ImporterSettings":
        return replace(self, **{key: value for key, value in changes.items() if value is not None})


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path) or {}
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path) or {}
    return _deep_merge(base, overlay)


def _env_positive_int(env: Mapping[str, str], name: str, default: int, notes: list[str]) -> int:
    raw = env.get(name)
    if not raw:
        return default
    try:
        parsed = int(raw)
    except ValueError:
        parsed = 0
    if parsed <= 0:
        notes.append(f'Invalid numeric value "{raw}" for {name}, using default {default}')
        return default
    return parsed


def _env_log_level(env: Mapping[str, str], notes: list[str]) -> str:
    raw = env.get("LOG_LEVEL")
    if not raw:
        return DEFAULT_LOG_LEVEL
    level = raw.strip().upper()
    if level not in LOG_LEVELS:
        notes.append(f'Invalid LOG_LEVEL "{raw}", using default {DEFAULT_LOG_LEVEL}')
        return DEFAULT_LOG_LEVEL
    return level


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() == "true"


def load_settings(
    config_dir: Path,
    *,
    overlay_config_dir: Path | None = None,
    env: Mapping[str, str] | None = None,
    allow_unknown: bool = False,
) -> ImporterSettings:
    env = os.environ if env is None else env
    overlay_path = (overlay_config_dir / CONFIG_FILENAME) if overlay_config_dir is not None else None
    cfg = validate_importer_config(
        _load_yaml_with_overlay(config_dir / CONFIG_FILENAME, overlay_path),
        allow_unknown=allow_unknown,
    )

    notes: list[str] = []
    hubspot = cfg["hubspot"]
    feed = cfg["feed"]
    run = cfg["import"]
    retry = cfg["retry"]

    token = next((env[name] for name in TOKEN_ENV_VARS if env.get(name)), None)

    return ImporterSettings(
        access_token=token,
        base_url=str(hubspot["base_url"]).rstrip("/"),
        object_type=str(hubspot["object_type"]),
        identifier_property=str(hubspot["identifier_property"]),
        ensure_properties=bool(hubspot.get("ensure_properties", True)),
        rate_per_sec=float(hubspot.get("rate_per_sec", 9.0)),
        feed_url=env.get("FEED_URL") or feed.get("url"),
        feed_file_path=env.get("FEED_FILE_PATH") or feed.get("file_path"),
        wrapper_keys=tuple(feed["wrapper_keys"]),
        feed_timeout_seconds=float(feed["timeout_seconds"]),
        batch_size=_env_positive_int(env, "BATCH_SIZE", int(run["batch_size"]), notes),
        warning_example_cap=int(run["warning_example_cap"]),
        max_workers=int(run.get("max_workers", 1)),
        dry_run=_env_flag(env, "DRY_RUN", bool(run.get("dry_run", False))),
        retry=RetryConfig(
            max_attempts=_env_positive_int(env, "RETRY_ATTEMPTS", int(retry["max_attempts"]), notes),
            multiplier=float(retry["multiplier"]),
            max_wait=float(retry["max_wait"]),
        ),
        log_level=_env_log_level(env, notes),
        config_warnings=tuple(notes),
    )
