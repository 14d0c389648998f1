#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys

from dramabox_backend.models.catalog import group_by_genre, search_shows, shows_for_genre
from dramabox_backend.models.shows import ShowRecord
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
        prog="list_catalog",
        description="Print the catalog (Supabase merged with the local cache, or the cache alone when offline).",
    )
    add_common_args(parser)
    parser.add_argument("--genre", default=None, help="Only shows tagged with this genre.")
    parser.add_argument("--search", default=None, help="Case-insensitive title/subtitle filter.")
    parser.add_argument("--by-genre", action="store_true", help="Group output by genre.")
    return parser.parse_args(argv)


def _format_show(show: ShowRecord) -> str:
    year = f" ({show.year})" if show.year else ""
    return f"{show.title}{year} - {len(show.episodes)} episodes"


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv if argv is not None else sys.argv[1:])
    configure_logging(args.verbose)
    load_env()

    settings = resolve_settings(args)
    online = resolve_online(args)
    shows = build_sync_service(settings, online=online).load_catalog(online=online)

    if args.genre:
        shows = shows_for_genre(shows, args.genre)
    if args.search:
        shows = search_shows(shows, args.search)

    if not shows:
        print("No shows in the catalog.")
        return 0

    if args.by_genre:
        for genre, members in sorted(group_by_genre(shows).items(), key=lambda kv: kv[0].casefold()):
            print(f"{genre} ({len(members)})")
            for show in members:
                print(f"  {_format_show(show)}")
        return 0

    for show in shows:
        print(_format_show(show))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
