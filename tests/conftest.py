import os

# Avant tout import de marketplace: la config lit l'environnement au chargement
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")
os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-test-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "service-test-key")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("SESSION_SECRET_KEY", "test-session-secret")

import pytest
from typing import Generator
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from marketplace.app import app as fastapi_app
from marketplace.accounts.models import Identity, Role
from marketplace.utils.security import require_user, require_vendor

BUYER = Identity(id="buyer-1", email="buyer@example.com", role=Role.CUSTOMER, token="buyer-token")
VENDOR = Identity(id="vendor-1", email="vendor@example.com", role=Role.VENDOR, token="vendor-token")

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

@pytest.fixture
def buyer() -> Identity:
    return BUYER

@pytest.fixture
def vendor() -> Identity:
    return VENDOR

# Simuler un acheteur authentifié pour les endpoints protégés
@pytest.fixture(autouse=True)
def _override_require_user(app):
    app.dependency_overrides[require_user] = lambda: BUYER
    try:
        yield
    finally:
        app.dependency_overrides.pop(require_user, None)

@pytest.fixture
def vendor_client(app, client):
    """Client API avec un vendeur authentifié (require_vendor et require_user)."""
    app.dependency_overrides[require_vendor] = lambda: VENDOR
    app.dependency_overrides[require_user] = lambda: VENDOR
    yield client
    app.dependency_overrides.pop(require_vendor, None)

# Aucun test ne doit joindre le vrai Supabase
@pytest.fixture(scope="function", autouse=True)
def mock_db_dependency(monkeypatch):
    monkeypatch.setattr("marketplace.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("marketplace.infra.supabase_client.get_service_supabase", lambda: MagicMock())
