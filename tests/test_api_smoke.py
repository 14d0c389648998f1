"""
Smoke tests for the DramaBox catalog API.

The catalog dependency is overridden, so no cache file or database is needed.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from api import deps
from api.main import app
from dramabox_backend.db.local_cache import LocalCacheStore
from dramabox_backend.models.shows import Episode, ShowRecord


def _catalog() -> list[ShowRecord]:
    return [
        ShowRecord(
            title="Big White Duel",
            year="2019",
            genres=["Medical", "Drama"],
            episodes=[Episode(title="Episode 1", url="https://tvb.example.com/duel-1")],
        ),
        ShowRecord(
            title="Go With The Float",
            year="2024",
            subtitle="Floating Through Life",
            schedule="Mon - Fri",
            genres=["Comedy", "drama"],
            cast=["Kenneth Ma"],
            episodes=[
                Episode(title="Episode 1", url="https://tvb.example.com/float-1", thumbnail_url="https://img/1.jpg"),
                Episode(title="Episode 2", url="https://tvb.example.com/float-2"),
            ],
        ),
    ]


@pytest.fixture
def client():
    """Create a test client serving a fixed catalog."""
    app.dependency_overrides[deps.get_catalog] = _catalog
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealthEndpoints:
    """Test health check endpoints."""

    def test_health_returns_healthy(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "dramabox-backend"}


class TestShowsEndpoints:
    """Test show browsing endpoints."""

    def test_list_shows(self, client: TestClient):
        response = client.get("/api/v1/shows")
        assert response.status_code == 200
        data = response.json()
        assert [s["key"] for s in data] == ["big white duel-2019", "go with the float-2024"]
        assert data[1]["episode_count"] == 2

    def test_list_shows_filters_by_genre_and_query(self, client: TestClient):
        assert [s["title"] for s in client.get("/api/v1/shows", params={"genre": "comedy"}).json()] == [
            "Go With The Float"
        ]
        assert [s["title"] for s in client.get("/api/v1/shows", params={"q": "DUEL"}).json()] == ["Big White Duel"]

    def test_get_show_includes_episodes(self, client: TestClient):
        response = client.get("/api/v1/shows/Go With The Float-2024")
        assert response.status_code == 200
        data = response.json()
        assert data["subtitle"] == "Floating Through Life"
        assert data["cast"] == ["Kenneth Ma"]
        assert [e["title"] for e in data["episodes"]] == ["Episode 1", "Episode 2"]
        assert data["episodes"][0]["thumbnail_url"] == "https://img/1.jpg"

    def test_get_unknown_show_returns_404(self, client: TestClient):
        response = client.get("/api/v1/shows/missing-2000")
        assert response.status_code == 404


class TestGenresEndpoints:
    """Test genre grouping endpoints."""

    def test_list_genres_with_counts(self, client: TestClient):
        response = client.get("/api/v1/genres")
        assert response.status_code == 200
        assert response.json() == [
            {"name": "Comedy", "show_count": 1},
            {"name": "Drama", "show_count": 2},
            {"name": "Medical", "show_count": 1},
        ]

    def test_list_genre_shows(self, client: TestClient):
        response = client.get("/api/v1/genres/DRAMA")
        assert response.status_code == 200
        assert [s["title"] for s in response.json()] == ["Big White Duel", "Go With The Float"]

    def test_unknown_genre_is_empty(self, client: TestClient):
        response = client.get("/api/v1/genres/western")
        assert response.status_code == 200
        assert response.json() == []


def test_missing_cache_serves_empty_catalog(tmp_path: Path):
    app.dependency_overrides[deps.get_cache_store] = lambda: LocalCacheStore(tmp_path / "missing.json")
    try:
        client = TestClient(app)
        assert client.get("/api/v1/shows").json() == []
        assert client.get("/api/v1/genres").json() == []
    finally:
        app.dependency_overrides.clear()


def test_corrupt_cache_serves_empty_catalog(tmp_path: Path):
    path = tmp_path / "ShowDetails.json"
    path.write_bytes(b"\xff\xfe not json")
    app.dependency_overrides[deps.get_cache_store] = lambda: LocalCacheStore(path)
    try:
        response = TestClient(app).get("/api/v1/shows")
        assert response.status_code == 200
        assert response.json() == []
    finally:
        app.dependency_overrides.clear()
