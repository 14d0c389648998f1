from __future__ import annotations

from pathlib import Path

import pytest

from dramabox_backend.integrations.tvb.fetcher import NetworkError
from dramabox_backend.integrations.tvb.parser import (
    PLACEHOLDER_THUMBNAIL_URL,
    ParseError,
    flatten_catalog,
    parse_catalog_page,
)

BASE_URL = "https://tvbanywherena.com"


def _fixture(name: str) -> str:
    repo_root = Path(__file__).resolve().parents[3]
    return (repo_root / "tests" / "fixtures" / "tvb" / name).read_text(encoding="utf-8")


def test_parse_catalog_page_groups_entries_by_category() -> None:
    grouped = parse_catalog_page(_fixture("catalog_page.html"), base_url=BASE_URL)

    assert list(grouped) == ["Latest Dramas", "Comedy"]
    latest = grouped["Latest Dramas"]
    assert [e.title for e in latest] == ["Go With The Float", "The Queen of News"]
    assert latest[0].detail_url == "https://tvbanywherena.com/english/show/go-with-the-float"
    assert latest[0].thumbnail_url == "https://tvbanywherena.com/images/float-thumb.jpg"


def test_parse_catalog_page_uses_placeholder_for_missing_thumbnail() -> None:
    grouped = parse_catalog_page(_fixture("catalog_page.html"), base_url=BASE_URL)

    queen = grouped["Latest Dramas"][1]
    assert queen.thumbnail_url == PLACEHOLDER_THUMBNAIL_URL


def test_parse_catalog_page_follows_more_link_once() -> None:
    calls: list[str] = []

    def fetch_html(url: str) -> str:
        calls.append(url)
        return _fixture("more_page.html")

    grouped = parse_catalog_page(_fixture("catalog_page.html"), base_url=BASE_URL, fetch_html=fetch_html)

    assert calls == ["https://tvbanywherena.com/english/latest"]
    titles = [e.title for e in grouped["Latest Dramas"]]
    # The Queen of News is listed inline and on the "more" page; it is kept once.
    assert titles == ["Go With The Float", "The Queen of News", "Forensic Heroes"]


def test_parse_catalog_page_keeps_inline_entries_when_more_page_fails() -> None:
    def fetch_html(url: str) -> str:
        raise NetworkError("HTTP 503", url=url, status_code=503)

    grouped = parse_catalog_page(_fixture("catalog_page.html"), base_url=BASE_URL, fetch_html=fetch_html)

    assert [e.title for e in grouped["Latest Dramas"]] == ["Go With The Float", "The Queen of News"]


def test_flatten_catalog_dedupes_shows_listed_in_several_categories() -> None:
    entries = flatten_catalog(parse_catalog_page(_fixture("catalog_page.html"), base_url=BASE_URL))

    assert [e.title for e in entries] == ["Go With The Float", "The Queen of News", "Big White Duel"]


@pytest.mark.parametrize("html", ["", "<html><body><p>maintenance</p></body></html>"])
def test_parse_catalog_page_without_sections_returns_empty(html: str) -> None:
    assert parse_catalog_page(html, base_url=BASE_URL) == {}


def _reject_declarations(monkeypatch: pytest.MonkeyPatch) -> None:
    from bs4 import BeautifulSoup, ParserRejectedMarkup

    from dramabox_backend.integrations.tvb import parser as mod

    def soup(markup: str, features: str) -> BeautifulSoup:
        if "<![" in markup:
            raise ParserRejectedMarkup("expected name token at '<![ x'")
        return BeautifulSoup(markup, features)

    monkeypatch.setattr(mod, "BeautifulSoup", soup)


def test_parse_catalog_page_raises_parse_error_on_rejected_markup(monkeypatch: pytest.MonkeyPatch) -> None:
    _reject_declarations(monkeypatch)

    with pytest.raises(ParseError, match="catalog"):
        parse_catalog_page("<![ x", base_url=BASE_URL)


def test_parse_catalog_page_keeps_inline_entries_when_more_page_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    _reject_declarations(monkeypatch)

    grouped = parse_catalog_page(_fixture("catalog_page.html"), base_url=BASE_URL, fetch_html=lambda _url: "<![ x")

    assert [e.title for e in grouped["Latest Dramas"]] == ["Go With The Float", "The Queen of News"]
