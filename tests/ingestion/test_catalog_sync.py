from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from dramabox_backend.config import SyncSettings
from dramabox_backend.db.local_cache import LocalCacheStore
from dramabox_backend.ingestion.catalog_sync import CatalogSyncService
from dramabox_backend.ingestion.notifications import Notification, NotificationDispatcher
from dramabox_backend.integrations.tvb.fetcher import NetworkError
from dramabox_backend.models.catalog import CatalogState
from dramabox_backend.models.shows import ShowRecord
from dramabox_backend.repositories.shows import ShowRepositoryError

BASE_URL = "https://tvbanywherena.com"

FORENSIC_DETAIL = """
<div class="top-div"><div class="info-div">
  <h1>Forensic Heroes</h1>
  <table><tr><td class="info-table-title">Year</td><td class="info-table-val"><button>2006</button></td></tr></table>
</div></div>
"""


def _fixture(name: str) -> str:
    repo_root = Path(__file__).resolve().parents[2]
    return (repo_root / "tests" / "fixtures" / "tvb" / name).read_text(encoding="utf-8")


class _FakeFetcher:
    def __init__(self, pages: dict[str, str]) -> None:
        self.pages = pages
        self.requested: list[str] = []

    def fetch(self, url: str) -> str:
        self.requested.append(url)
        if url not in self.pages:
            raise NetworkError(f"HTTP 404 fetching {url}", url=url, status_code=404)
        return self.pages[url]


class _ListSink:
    def __init__(self) -> None:
        self.delivered: list[Notification] = []

    def deliver(self, notification: Notification) -> None:
        self.delivered.append(notification)


def _site() -> dict[str, str]:
    # The Queen of News has no detail page and fails every attempt.
    return {
        f"{BASE_URL}/english": _fixture("catalog_page.html"),
        f"{BASE_URL}/english/latest": _fixture("more_page.html"),
        f"{BASE_URL}/english/show/go-with-the-float": _fixture("show_detail.html"),
        f"{BASE_URL}/english/show/big-white-duel": _fixture("show_detail_minimal.html"),
        f"{BASE_URL}/english/show/forensic-heroes": FORENSIC_DETAIL,
    }


def _service(tmp_path: Path, pages: dict[str, str], **kwargs) -> tuple[CatalogSyncService, _ListSink]:  # noqa: ANN003
    sink = _ListSink()
    settings = SyncSettings(base_url=BASE_URL, cache_path=tmp_path / "ShowDetails.json", retry_delay_seconds=0)
    service = CatalogSyncService(
        fetcher=_FakeFetcher(pages),
        cache=LocalCacheStore(settings.cache_path),
        notifier=NotificationDispatcher(sink),
        settings=settings,
        **kwargs,
    )
    return service, sink


def test_run_cycle_offline_builds_cache_and_notifies_new_shows(tmp_path: Path) -> None:
    state = CatalogState()
    service, sink = _service(tmp_path, _site(), state=state)

    result = service.run_cycle(online=False)

    assert result.online is False
    assert result.entries_found == 4
    assert result.details.succeeded == 3
    assert result.details.failed == 1
    assert [s.title for s in result.catalog] == ["Big White Duel", "Forensic Heroes", "Go With The Float"]
    assert result.cache_saved is True
    assert [s.title for s in LocalCacheStore(tmp_path / "ShowDetails.json").load()] == [
        "Big White Duel",
        "Forensic Heroes",
        "Go With The Float",
    ]
    assert len(sink.delivered) == 3
    assert [s.title for s in state.shows] == [s.title for s in result.catalog]

    duel = result.catalog[0]
    assert duel.thumb_image_url == f"{BASE_URL}/images/duel.jpg"


def test_second_cycle_with_unchanged_site_notifies_nothing(tmp_path: Path) -> None:
    service, sink = _service(tmp_path, _site())
    service.run_cycle(online=False)
    sink.delivered.clear()

    result = service.run_cycle(online=False)

    assert result.merge.new_shows == []
    assert result.merge.new_episodes == []
    assert sink.delivered == []


def test_run_cycle_dry_run_writes_nothing(tmp_path: Path) -> None:
    remote = MagicMock()
    remote.fetch_all.return_value = []
    service, sink = _service(tmp_path, _site(), remote=remote)

    result = service.run_cycle(online=True, dry_run=True)

    assert len(result.merge.new_shows) == 3
    assert result.cache_saved is False
    assert not (tmp_path / "ShowDetails.json").exists()
    assert sink.delivered == []
    remote.insert_show.assert_not_called()
    remote.insert_episodes.assert_not_called()


def test_run_cycle_keeps_cache_when_catalog_page_is_down(tmp_path: Path) -> None:
    cache = LocalCacheStore(tmp_path / "ShowDetails.json")
    cache.save([ShowRecord(title="Cached Show", year="2010")])
    service, sink = _service(tmp_path, {})

    result = service.run_cycle(online=False)

    assert result.entries_found == 0
    assert [s.title for s in result.catalog] == ["Cached Show"]
    assert sink.delivered == []


def test_run_cycle_respects_only_new_and_limit(tmp_path: Path) -> None:
    cache = LocalCacheStore(tmp_path / "ShowDetails.json")
    cache.save([ShowRecord(title="Go With The Float", year="2024")])
    service, _sink = _service(tmp_path, _site())

    result = service.run_cycle(online=False, only_new=True, limit=1)

    assert result.details.attempted == 1
    assert f"{BASE_URL}/english/show/go-with-the-float" not in service._fetcher.requested


def test_run_cycle_continues_when_remote_listing_fails(tmp_path: Path) -> None:
    remote = MagicMock()
    remote.fetch_all.side_effect = ShowRepositoryError("Supabase error during listing shows: timeout")
    remote.find_show_id.return_value = None
    remote.insert_show.side_effect = [1, 2, 3]
    service, sink = _service(tmp_path, _site(), remote=remote)

    result = service.run_cycle(online=True)

    assert result.online is True
    assert remote.insert_show.call_count == 3
    assert result.merge.shows_inserted == 3
    assert {s.remote_id for s in result.catalog} == {1, 2, 3}
    assert len(sink.delivered) == 3


@pytest.mark.parametrize("online", [True, False])
def test_load_catalog_without_cache_or_remote_is_empty(tmp_path: Path, online: bool) -> None:
    remote = MagicMock()
    remote.fetch_all.side_effect = ShowRepositoryError("down")
    service, _sink = _service(tmp_path, {}, remote=remote)

    assert service.load_catalog(online=online) == []


def test_load_catalog_online_merges_remote_into_cache(tmp_path: Path) -> None:
    cache = LocalCacheStore(tmp_path / "ShowDetails.json")
    cache.save([ShowRecord(title="Cached Show", year="2010")])
    remote = MagicMock()
    remote.fetch_all.return_value = [ShowRecord(title="Remote Show", year="2011", remote_id=9)]
    service, _sink = _service(tmp_path, {}, remote=remote)

    shows = service.load_catalog(online=True)

    assert [s.title for s in shows] == ["Cached Show", "Remote Show"]
    assert [s.title for s in cache.load()] == ["Cached Show", "Remote Show"]


def test_run_cycle_survives_an_unparseable_catalog_page(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    from bs4 import BeautifulSoup, ParserRejectedMarkup

    from dramabox_backend.integrations.tvb import parser as parser_mod

    def soup(markup: str, features: str) -> BeautifulSoup:
        if "<![" in markup:
            raise ParserRejectedMarkup("expected name token at '<![ x'")
        return BeautifulSoup(markup, features)

    monkeypatch.setattr(parser_mod, "BeautifulSoup", soup)
    cache = LocalCacheStore(tmp_path / "ShowDetails.json")
    cache.save([ShowRecord(title="Cached Show", year="2010")])
    service, sink = _service(tmp_path, {f"{BASE_URL}/english": "<![ x"})

    result = service.run_cycle(online=False)

    assert result.entries_found == 0
    assert result.cache_saved is True
    assert [s.title for s in result.catalog] == ["Cached Show"]
    assert sink.delivered == []


def test_run_cycle_drops_unparseable_detail_pages_only(tmp_path: Path) -> None:
    pages = _site()
    pages[f"{BASE_URL}/english/show/big-white-duel"] = "<![ x"
    service, _sink = _service(tmp_path, pages)

    result = service.run_cycle(online=False)

    assert [s.title for s in result.catalog] == ["Forensic Heroes", "Go With The Float"]
    assert result.details.failed == 2
    assert result.cache_saved is True


def test_run_cycle_treats_a_non_utf8_cache_as_empty(tmp_path: Path) -> None:
    (tmp_path / "ShowDetails.json").write_bytes(b'[{"title": "\xff\xfe"}]')
    service, sink = _service(tmp_path, _site())

    result = service.run_cycle(online=False)

    assert len(result.merge.new_shows) == 3
    assert result.cache_saved is True
    assert len(sink.delivered) == 3
