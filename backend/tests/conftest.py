from datetime import date

import pytest
from fastapi.testclient import TestClient

from app.config import get_settings
from app.core.client_store import InMemoryClientStore
from app.core.store_provider import StoreProvider
from app.services.client_service import ClientService

TODAY = date(2024, 3, 15)


def make_body(**overrides) -> dict:
    """Flat form payload as the roster page sends it."""
    body = {
        "name": "Ravi Kumar",
        "contact": "9876543210",
        "aadhaar": "123412341234",
        "heightFt": 5,
        "heightIn": 9,
        "weight": 72.5,
        "goal": "Lose Weight",
        "feesSubmitted": 1500,
        "feesDue": 0,
        "pt": "None",
        "months": 3,
        "feeDate": "2024-03-01",
        "hasMedicalCondition": False,
        "medicalConditionDetails": "",
    }
    body.update(overrides)
    return body


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    monkeypatch.setenv("STORE_BACKEND", "memory")
    monkeypatch.setenv("SUPABASE_URL", "")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def store():
    return InMemoryClientStore()


@pytest.fixture
def service(store):
    return ClientService(store, today=lambda: TODAY)


@pytest.fixture
def api(store):
    """TestClient over the real app, backed by an in-memory store and a fixed clock."""
    from app.api.clients import get_clock
    from app.main import app

    app.state.store_provider = StoreProvider(lambda: store)
    app.dependency_overrides[get_clock] = lambda: (lambda: TODAY)
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
