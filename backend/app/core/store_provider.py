"""
Gym Roster — Store Lifecycle
One provider per process, created at startup and handed to request handlers.
The store itself is built lazily on first use; a failed build is reported as
ServiceUnavailable and retried on the next request.
"""

import threading
from typing import Callable, Optional

from app.config import Settings, get_settings
from app.core.client_store import ClientStore, InMemoryClientStore
from app.core.errors import ServiceUnavailableError
from app.utils.logger import logger


def _supabase_factory() -> ClientStore:
    from app.core.supabase_client import SupabaseClientStore

    return SupabaseClientStore()


STORE_FACTORIES: dict[str, Callable[[], ClientStore]] = {
    "memory": InMemoryClientStore,
    "supabase": _supabase_factory,
}


class StoreProvider:
    """Owns the shared ClientStore: init, health-check, teardown."""

    def __init__(self, factory: Callable[[], ClientStore]):
        self._factory = factory
        self._store: Optional[ClientStore] = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "StoreProvider":
        settings = settings or get_settings()
        backend = settings.resolved_store_backend
        factory = STORE_FACTORIES.get(backend)
        if factory is None:
            raise ValueError(f"Unknown STORE_BACKEND '{settings.store_backend}' (expected memory or supabase)")
        logger.info(f"🗄️ Client store backend: {backend}")
        return cls(factory)

    @property
    def is_connected(self) -> bool:
        return self._store is not None

    def get(self) -> ClientStore:
        """Return the shared store, building it on first use. Safe to call repeatedly."""
        if self._store is not None:
            return self._store
        with self._lock:
            if self._store is None:
                try:
                    self._store = self._factory()
                except Exception as exc:
                    logger.error(f"❌ Client store initialisation failed: {exc}")
                    raise ServiceUnavailableError(
                        "Client database is unavailable. Please try again shortly."
                    ) from exc
                logger.info(f"✅ Client store ready ({self._store.name})")
        return self._store

    def startup(self) -> None:
        """Eager connect at process start; a failure is logged, not raised."""
        try:
            self.get()
        except ServiceUnavailableError:
            logger.warning("⚠️ Starting without a client store; will retry on first request.")

    def health(self) -> dict:
        if self._store is None:
            try:
                self.get()
            except ServiceUnavailableError:
                return {"connected": False, "healthy": False, "backend": None}
        return {"connected": True, "healthy": self._store.ping(), "backend": self._store.name}

    def shutdown(self) -> None:
        with self._lock:
            if self._store is not None:
                self._store.close()
                logger.info("👋 Client store closed")
            self._store = None
