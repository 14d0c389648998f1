from __future__ import annotations

import pytest

from dramabox_backend.db import supabase as mod


@pytest.fixture(autouse=True)
def _clear_cached_settings():
    mod.get_supabase_url.cache_clear()
    mod.get_supabase_service_key.cache_clear()
    yield
    mod.get_supabase_url.cache_clear()
    mod.get_supabase_service_key.cache_clear()


def test_supabase_configured_requires_both_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://abc.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "   ")
    assert mod.supabase_configured() is False

    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-key")
    assert mod.supabase_configured() is True


def test_missing_url_points_at_offline_mode(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SUPABASE_URL", raising=False)

    with pytest.raises(RuntimeError, match="--offline"):
        mod.get_supabase_url()


def test_create_supabase_admin_client_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUPABASE_URL", " https://abc.supabase.co ")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-key")
    calls: list[tuple[str, str]] = []
    monkeypatch.setattr(mod, "create_client", lambda url, key: calls.append((url, key)) or "client")

    assert mod.create_supabase_admin_client() == "client"
    assert mod.create_supabase_admin_client(url="https://other.supabase.co") == "client"
    assert calls == [
        ("https://abc.supabase.co", "service-key"),
        ("https://other.supabase.co", "service-key"),
    ]
