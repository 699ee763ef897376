"""Import a JSON real estate feed into HubSpot listings."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from listings_importer.common.config_loader import ImporterSettings, load_settings
from listings_importer.common.constants import EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS
from listings_importer.common.errors import ConfigError, PipelineError
from listings_importer.common.http import HttpClient, TimeoutConfig
from listings_importer.common.ids import generate_run_id
from listings_importer.common.logging import build_logger, close_logger, log_event
from listings_importer.feed.fetch import fetch_feed_url, read_feed_file, unwrap_feed
from listings_importer.hubspot.client import HubSpotListingsStore
from listings_importer.hubspot.dry_run import DryRunStore
from listings_importer.importer import run_import


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="listings-importer", description=__doc__)
    source = parser.add_mutually_exclusive_group()
    source.add_argument("-f", "--file", default=None, help="Path to JSON feed file")
    source.add_argument("-u", "--url", default=None, help="URL to JSON feed")
    parser.add_argument("--dry-run", action="store_true", help="Run without making changes to HubSpot")
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--log-level", default=None, choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--batch-size", type=int, default=None)
    parser.add_argument("--workers", type=int, default=None)
    return parser.parse_args(argv)


def resolve_settings(args: argparse.Namespace) -> ImporterSettings:
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    settings = load_settings(Path(args.config_dir), overlay_config_dir=overlay_config_dir)
    if args.batch_size is not None and args.batch_size <= 0:
        raise ConfigError("--batch-size must be positive")
    if args.workers is not None and args.workers <= 0:
        raise ConfigError("--workers must be positive")

    settings = settings.with_overrides(
        batch_size=args.batch_size,
        max_workers=args.workers,
        log_level=args.log_level,
    )
    if args.file:
        settings = settings.with_overrides(feed_file_path=args.file, feed_url="")
    elif args.url:
        settings = settings.with_overrides(feed_url=args.url, feed_file_path="")
    if args.dry_run:
        settings = settings.with_overrides(dry_run=True)

    if not settings.feed_url and not settings.feed_file_path:
        raise ConfigError("Either --file or --url (or FEED_URL / FEED_FILE_PATH) must be provided")
    if not settings.dry_run:
        settings.require_token()
    return settings


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    data_dir = Path(args.data_dir)
    settings = resolve_settings(args)

    logger = build_logger(run_id, data_dir=data_dir, level=settings.log_level)
    for note in settings.config_warnings:
        log_event(logger, note, level="WARNING", run_id=run_id, stage="config", event="CONFIG_WARNING", status="warning")

    http_client = HttpClient(
        timeout=TimeoutConfig(connect=10.0, read=settings.feed_timeout_seconds),
        retry=settings.retry,
        rate_per_sec=settings.rate_per_sec,
        logger=logger,
    )

    def load_feed() -> list:
        if settings.feed_file_path:
            payload = read_feed_file(Path(settings.feed_file_path))
        else:
            payload = fetch_feed_url(settings.feed_url, http_client, timeout_seconds=settings.feed_timeout_seconds)
        return unwrap_feed(payload, settings.wrapper_keys)

    if settings.dry_run:
        log_event(logger, "Running in DRY-RUN mode - no changes will be made to HubSpot", run_id=run_id, event="DRY_RUN")
        store = DryRunStore(logger=logger)
    else:
        store = HubSpotListingsStore(
            settings.require_token(),
            base_url=settings.base_url,
            object_type=settings.object_type,
            identifier_property=settings.identifier_property,
            http_client=http_client,
            logger=logger,
        )

    try:
        result = run_import(settings, store=store, load_feed=load_feed, logger=logger, run_id=run_id, data_dir=data_dir)
    except PipelineError as exc:
        log_event(
            logger,
            f"Import failed: {exc}",
            level="ERROR",
            run_id=run_id,
            stage="import",
            event="RUN_FAIL",
            status="error",
            error_code=exc.error_code,
        )
        return EXIT_HARD_FAIL
    except Exception as exc:
        log_event(
            logger,
            f"Unexpected import failure: {exc}",
            level="ERROR",
            run_id=run_id,
            stage="import",
            event="RUN_FAIL",
            status="error",
            error_code="UNEXPECTED_ERROR",
        )
        return EXIT_HARD_FAIL
    finally:
        http_client.close()
        close_logger(logger)

    if not result.success:
        return EXIT_PARTIAL
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        return run_command(args)
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_HARD_FAIL
    except PipelineError:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
