"""Load the listings feed from a URL or a local JSON file."""

from __future__ import annotations

import ipaddress
import json
from pathlib import Path
from typing import Any, Iterable
from urllib.parse import urlparse

from listings_importer.common.errors import StageError
from listings_importer.common.fs import read_json
from listings_importer.common.http import HttpClient, TimeoutConfig

DEFAULT_WRAPPER_KEYS = ("listings", "results", "data")
BLOCKED_HOSTNAMES = {"localhost", "127.0.0.1", "::1", "0.0.0.0"}


def validate_feed_url(url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise StageError(f"Invalid feed URL: only HTTP and HTTPS protocols are allowed ({url})")

    hostname = (parsed.hostname or "").lower()
    if not hostname:
        raise StageError(f"Invalid feed URL: missing host ({url})")
    if hostname in BLOCKED_HOSTNAMES:
        raise StageError(f"Invalid feed URL: requests to localhost are not allowed ({url})")

    try:
        address = ipaddress.ip_address(hostname)
    except ValueError:
        return url
    if address.is_private or address.is_loopback or address.is_link_local:
        raise StageError(f"Invalid feed URL: requests to private IP ranges are not allowed ({url})")
    return url


def fetch_feed_url(url: str, http_client: HttpClient, *, timeout_seconds: float = 30.0) -> Any:
    validate_feed_url(url)
    return http_client.get_json(url, timeout=TimeoutConfig(connect=min(10.0, timeout_seconds), read=timeout_seconds))


def read_feed_file(path: Path) -> Any:
    if not path.exists():
        raise StageError(f"Feed file not found: {path}")
    try:
        return read_json(path)
    except json.JSONDecodeError as exc:
        raise StageError(f"Feed file is not valid JSON: {path}") from exc


def unwrap_feed(payload: Any, wrapper_keys: Iterable[str] = DEFAULT_WRAPPER_KEYS) -> list[Any]:
    if payload is None or payload == "":
        raise StageError("Feed data is empty or null")
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in wrapper_keys:
            if isinstance(payload.get(key), list):
                return payload[key]
        return [payload]
    raise StageError("Unable to parse feed structure")
