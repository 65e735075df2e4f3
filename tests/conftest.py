"""
tests/conftest.py -- Shared test fixtures for the Movies API.

This module provides:
  - engine: a fresh SQLite file database per test (tmp_path), schema created
  - identity_store / favorites_store: request-scoped stores on that engine
  - token_issuer: a TokenIssuer with a fixed test key
  - FakeCatalogClient: in-memory stand-in for OmdbClient that counts calls
  - api_client: TestClient with a patched lifespan wired to the above

Design: file databases under tmp_path rather than ':memory:'. Each store
checks out its own pooled connection, and TestClient runs sync handlers in a
thread pool; a plain ':memory:' database is per-connection and would present
a blank schema to every new connection.

DEBUG must be set before any api/ import so get_settings() auto-generates
SECRET_KEY in dev mode instead of raising ValueError. The login rate limit
is raised so repeated logins across tests do not trip it.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from typing import Optional

# CRITICAL: Set env before any api/ or core.config import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from auth.store import IdentityStore
from auth.tokens import TokenIssuer
from cache.store import CatalogCache
from core.config import get_settings
from core.db import create_db_engine
from core.models import CatalogEntry
from favorites.store import FavoritesStore

TEST_SECRET = "test-secret-key-that-is-at-least-32-characters-long"

INCEPTION = CatalogEntry(
    title="Inception",
    year="2010",
    director="Christopher Nolan",
    poster="https://example.test/inception.jpg",
    catalog_id="tt1375666",
)
THE_DARK_KNIGHT = CatalogEntry(
    title="The Dark Knight",
    year="2008",
    director="Christopher Nolan",
    poster="https://example.test/tdk.jpg",
    catalog_id="tt0468569",
)
DARK_CITY = CatalogEntry(
    title="Dark City",
    year="1998",
    director="Alex Proyas",
    poster="N/A",
    catalog_id="tt0118929",
)


class FakeCatalogClient:
    """Returns canned entries by exact title and records every call."""

    def __init__(self, entries: Optional[dict[str, CatalogEntry]] = None) -> None:
        self.entries = dict(entries or {})
        self.calls: list[str] = []

    def fetch_by_title(self, title: str) -> Optional[CatalogEntry]:
        self.calls.append(title)
        return self.entries.get(title)


# ---------------------------------------------------------------------------
# Store and collaborator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def engine(tmp_path):
    eng = create_db_engine(f"sqlite:///{tmp_path / 'test_movies.db'}")
    yield eng
    eng.dispose()


@pytest.fixture
def identity_store(engine) -> Generator[IdentityStore, None, None]:
    store = IdentityStore(engine)
    yield store
    store.close()


@pytest.fixture
def favorites_store(engine) -> Generator[FavoritesStore, None, None]:
    store = FavoritesStore(engine)
    yield store
    store.close()


@pytest.fixture
def token_issuer() -> TokenIssuer:
    return TokenIssuer(secret_key=TEST_SECRET, issuer="MoviesApi", audience="MoviesApiUsers")


@pytest.fixture
def catalog_client() -> FakeCatalogClient:
    return FakeCatalogClient({e.title: e for e in (INCEPTION, THE_DARK_KNIGHT, DARK_CITY)})


@pytest.fixture
def catalog_cache(catalog_client) -> CatalogCache:
    return CatalogCache(catalog_client)


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------


def _patch_lifespan(engine, token_issuer: TokenIssuer, catalog_cache: CatalogCache):
    """Return an async context manager that replaces the real lifespan.

    Wires the test engine, issuer and cache into app.state so routes never
    touch the production database or OMDb. The purge_task is a long-sleeping
    coroutine because shutdown calls .cancel() on it.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.settings = get_settings()
        app.state.token_issuer = token_issuer
        app.state.engine = engine
        app.state.catalog_cache = catalog_cache
        app.state.purge_task = asyncio.create_task(asyncio.sleep(99999))
        yield
        app.state.purge_task.cancel()

    return test_lifespan


@pytest.fixture
def api_client(engine, token_issuer, catalog_cache) -> Generator[TestClient, None, None]:
    """Yield a TestClient running the real app against per-test stores."""
    from api.main import app

    app.router.lifespan_context = _patch_lifespan(engine, token_issuer, catalog_cache)
    with TestClient(app, raise_server_exceptions=True) as client:
        yield client
