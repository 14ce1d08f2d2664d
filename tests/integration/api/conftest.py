from __future__ import annotations

from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from inkwell.adapters.cache.ttl_store import InMemoryTTLStore
from inkwell.api.auth_utils import create_access_token
from inkwell.api.deps import (
    Settings,
    get_clock,
    get_rules,
    get_settings,
    get_ttl_store,
)
from inkwell.api.main import app
from inkwell.rules.models import Rules

TEST_SECRET = "test-secret"


@pytest.fixture
def settings(tmp_path, monkeypatch, db_path) -> Settings:
    monkeypatch.setenv("INKWELL_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("INKWELL_BASE_URL", "http://testserver")
    monkeypatch.setenv("INKWELL_SECRET_KEY", TEST_SECRET)
    s = Settings()
    assert s.db_path == db_path
    return s


@pytest.fixture
def ttl_store(clock) -> InMemoryTTLStore:
    return InMemoryTTLStore(clock=clock)


@pytest.fixture
def client(settings, clock, ttl_store):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_rules] = lambda: Rules()
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_ttl_store] = lambda: ttl_store
    yield TestClient(app)
    app.dependency_overrides.clear()


def bearer(owner_id: UUID, name: str | None = None) -> dict[str, str]:
    claims = {"sub": str(owner_id)}
    if name:
        claims["name"] = name
    return {"Authorization": f"Bearer {create_access_token(claims, secret_key=TEST_SECRET)}"}


@pytest.fixture
def auth_headers(owner_id) -> dict[str, str]:
    return bearer(owner_id, "Ada")


@pytest.fixture
def stranger_headers() -> dict[str, str]:
    return bearer(uuid4())


@pytest.fixture
def new_article(client, auth_headers):
    """Create a draft through the editor page and return its id."""

    def _create() -> str:
        response = client.get("/articles/create", headers=auth_headers)
        assert response.status_code == 200
        marker = 'data-id="'
        start = response.text.index(marker) + len(marker)
        return response.text[start : response.text.index('"', start)]

    return _create
