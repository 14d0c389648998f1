"""
HTML extraction for the TVB Anywhere catalog and show detail pages.

The selectors below mirror the site's markup; any structural change on the site is
a breaking change here. Missing optional fields degrade to empty values, while a
missing detail block raises `ParseError`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from urllib.parse import urljoin

from bs4 import BeautifulSoup, ParserRejectedMarkup, Tag

from dramabox_backend.models.shows import CatalogEntry, Episode, ShowRecord

logger = logging.getLogger(__name__)

PLACEHOLDER_THUMBNAIL_URL = "https://via.placeholder.com/150"


class ParseError(RuntimeError):
    pass


def _soup(html: str, page: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(html or "", "html.parser")
    except ParserRejectedMarkup as exc:
        raise ParseError(f"Unparseable {page} page: {exc}") from exc


def _text(node: Tag | None) -> str:
    if node is None:
        return ""
    return node.get_text(" ", strip=True)


def _absolute_url(value: str | None, base_url: str) -> str | None:
    raw = (value or "").strip()
    if not raw:
        return None
    return urljoin(base_url, raw)


def _extract_entries(container: Tag, *, base_url: str) -> list[CatalogEntry]:
    entries: list[CatalogEntry] = []
    for drama in container.select("div.drama"):
        link = drama.select_one("a[href]")
        if link is None:
            continue
        detail_url = _absolute_url(link.get("href"), base_url)
        title = _text(link.select_one("div.title"))
        if not detail_url or not title:
            continue
        img = drama.select_one("img[src]")
        thumbnail_url = _absolute_url(img.get("src") if img else None, base_url) or PLACEHOLDER_THUMBNAIL_URL
        entries.append(CatalogEntry(title=title, detail_url=detail_url, thumbnail_url=thumbnail_url))
    return entries


def _dedupe_by_detail_url(entries: list[CatalogEntry]) -> list[CatalogEntry]:
    seen: set[str] = set()
    out: list[CatalogEntry] = []
    for entry in entries:
        if entry.detail_url in seen:
            continue
        seen.add(entry.detail_url)
        out.append(entry)
    return out


def parse_catalog_page(
    html: str,
    *,
    base_url: str,
    fetch_html: Callable[[str], str] | None = None,
) -> dict[str, list[CatalogEntry]]:
    """
    Group catalog entries by category header.

    When a header carries a "More >>" link and `fetch_html` is given, the linked page
    is fetched once and its entries are merged into the category. A failing fetch
    keeps the inline entries only.
    """

    soup = _soup(html, "catalog")
    grouped: dict[str, list[CatalogEntry]] = {}

    for header in soup.select("div.container.section-header"):
        category = _text(header.select_one("h3"))
        if not category:
            continue

        entries: list[CatalogEntry] = []
        container = header.find_next_sibling()
        if isinstance(container, Tag):
            entries.extend(_extract_entries(container, base_url=base_url))

        more_link = header.select_one("h4 a[href]")
        more_url = _absolute_url(more_link.get("href") if more_link else None, base_url)
        if more_url and fetch_html is not None:
            try:
                more_soup = _soup(fetch_html(more_url), "catalog 'more'")
            except RuntimeError as exc:
                logger.warning("Skipping 'more' page for category %r: %s", category, exc)
            else:
                more_container = more_soup.select_one("div.drama-section")
                if more_container is not None:
                    entries.extend(_extract_entries(more_container, base_url=base_url))

        grouped.setdefault(category, [])
        grouped[category] = _dedupe_by_detail_url([*grouped[category], *entries])

    return grouped


def flatten_catalog(grouped: dict[str, list[CatalogEntry]]) -> list[CatalogEntry]:
    """All entries across categories; a show listed in several categories appears once."""

    return _dedupe_by_detail_url([entry for entries in grouped.values() for entry in entries])


def _labeled_values(info_div: Tag, label: str) -> list[str]:
    wanted = label.casefold()
    for cell in info_div.select("td.info-table-title"):
        if wanted not in _text(cell).casefold():
            continue
        row = cell.parent
        if row is None:
            return []
        return [value for value in (_text(b) for b in row.select("td.info-table-val button")) if value]
    return []


def _extract_episodes(soup: BeautifulSoup, *, base_url: str) -> list[Episode]:
    episode_div = soup.select_one("div.episodeDiv")
    if episode_div is None:
        return []

    episodes: list[Episode] = []
    for item in episode_div.select("div.item.nopadding"):
        link = item.select_one("a[href]")
        if link is None:
            continue
        url = _absolute_url(link.get("href"), base_url)
        title = _text(link.select_one("div.episodeName"))
        # Title is the episode's identity; untitled items cannot be deduplicated.
        if not url or not title:
            continue
        img = link.select_one("img[src]")
        episodes.append(
            Episode(
                title=title,
                url=url,
                thumbnail_url=_absolute_url(img.get("src") if img else None, base_url),
            )
        )
    return episodes


def parse_show_detail_page(html: str, *, base_url: str) -> ShowRecord:
    soup = _soup(html, "show detail")

    top_div = soup.select_one("div.top-div")
    if top_div is None:
        raise ParseError("Show detail page has no `div.top-div` block.")
    info_div = top_div.select_one("div.info-div")
    if info_div is None:
        raise ParseError("Show detail page has no `div.info-div` block.")

    title = _text(info_div.select_one("h1"))
    if not title:
        raise ParseError("Show detail page has an empty title.")

    headings = info_div.select("h4")
    subtitle = _text(headings[0]) if headings else ""
    schedule = _text(headings[1]) if len(headings) > 1 else ""

    thumb = top_div.select_one("div.thumb-div img")
    banner = top_div.select_one("div.banner-div img")
    years = _labeled_values(info_div, "Year")

    return ShowRecord(
        title=title,
        year=years[0] if years else "",
        schedule=schedule,
        subtitle=subtitle or None,
        genres=_labeled_values(info_div, "Genre"),
        cast=_labeled_values(info_div, "Cast"),
        description=_text(info_div.select_one("div.info-description")),
        thumb_image_url=_absolute_url(thumb.get("src") if thumb else None, base_url),
        banner_image_url=_absolute_url(banner.get("src") if banner else None, base_url),
        episodes=_extract_episodes(soup, base_url=base_url),
    )
