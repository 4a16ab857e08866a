import pytest

from app.config import get_settings
from app.core.client_store import InMemoryClientStore
from app.core.errors import ServiceUnavailableError
from app.core.store_provider import StoreProvider


def test_lazy_init_happens_once():
    calls = []

    def factory():
        calls.append(1)
        return InMemoryClientStore()

    provider = StoreProvider(factory)
    assert provider.is_connected is False
    first = provider.get()
    assert provider.get() is first
    assert len(calls) == 1


def test_failed_init_is_retryable_and_recovers():
    attempts = {"n": 0}

    def flaky():
        attempts["n"] += 1
        if attempts["n"] == 1:
            raise ConnectionError("db down")
        return InMemoryClientStore()

    provider = StoreProvider(flaky)
    provider.startup()  # logs, does not raise
    assert provider.is_connected is False
    assert provider.health()["connected"] is True
    assert attempts["n"] == 2


def test_get_raises_service_unavailable():
    def broken():
        raise RuntimeError("bad credentials")

    provider = StoreProvider(broken)
    with pytest.raises(ServiceUnavailableError):
        provider.get()
    assert provider.health() == {"connected": False, "healthy": False, "backend": None}


def test_shutdown_allows_reconnect():
    provider = StoreProvider(InMemoryClientStore)
    first = provider.get()
    provider.shutdown()
    assert provider.is_connected is False
    assert provider.get() is not first


def test_from_settings_auto_selects_memory_without_supabase():
    provider = StoreProvider.from_settings()
    assert provider.get().name == "memory"


def test_auto_prefers_supabase_when_configured(monkeypatch):
    monkeypatch.setenv("STORE_BACKEND", "auto")
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    get_settings.cache_clear()
    assert get_settings().resolved_store_backend == "supabase"


def test_unknown_backend_is_rejected(monkeypatch):
    monkeypatch.setenv("STORE_BACKEND", "mongo")
    get_settings.cache_clear()
    with pytest.raises(ValueError):
        StoreProvider.from_settings()
