#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys

from dramabox_backend.utils.env import load_env

from scripts._sync_common import (
    add_common_args,
    build_sync_service,
    configure_logging,
    resolve_online,
    resolve_settings,
)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sync_catalog",
        description="Scrape the TVB catalog, reconcile it with the cache and Supabase, and notify on new items.",
    )
    add_common_args(parser)
    parser.add_argument("--dry-run", action="store_true", help="Scrape and merge without writing anywhere.")
    parser.add_argument("--limit", type=int, default=None, help="Optional cap on detail pages fetched.")
    parser.add_argument("--batch-size", type=int, default=None, help="Concurrent detail fetches per batch.")
    parser.add_argument("--max-retries", type=int, default=None, help="Extra attempts per detail page.")
    parser.add_argument(
        "--only-new",
        action="store_true",
        help="Skip detail pages for shows already in the cache or remote catalog.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv if argv is not None else sys.argv[1:])
    configure_logging(args.verbose)
    load_env()

    settings = resolve_settings(args)
    online = resolve_online(args)
    service = build_sync_service(settings, online=online)

    result = service.run_cycle(online=online, dry_run=args.dry_run, limit=args.limit, only_new=args.only_new)
    print(
        "SYNC summary "
        f"online={result.online} "
        f"dry_run={result.dry_run} "
        f"entries={result.entries_found} "
        f"fetched={result.details.succeeded} "
        f"failed={result.details.failed} "
        f"catalog={len(result.catalog)} "
        f"new_shows={len(result.merge.new_shows)} "
        f"new_episodes={len(result.merge.new_episodes)} "
        f"shows_uploaded={result.merge.shows_inserted} "
        f"episodes_uploaded={result.merge.episodes_inserted} "
        f"remote_failures={len(result.merge.remote_failures)} "
        f"notified={len(result.notifications)} "
        f"cache_saved={result.cache_saved}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
