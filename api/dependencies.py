"""
api/dependencies.py -- Request-scoped service construction and failure mapping.

Each request gets its own store (one pooled connection) wrapped in a service.
The generator dependencies close the store after the response is built, which
rolls back anything the handler did not commit.

Shared, process-wide collaborators (engine, token issuer, catalog cache,
settings) are read from app.state, where the lifespan put them.
"""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import HTTPException, Request

from auth.service import IdentityService
from auth.store import IdentityStore
from core.results import ErrorKind, Failure
from favorites.service import FavoritesService
from favorites.store import FavoritesStore

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.CONFLICT: 409,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION: 400,
}


def get_identity_service(request: Request) -> Iterator[IdentityService]:
    store = IdentityStore(request.app.state.engine)
    try:
        yield IdentityService(store, request.app.state.token_issuer)
    finally:
        store.close()


def get_favorites_service(request: Request) -> Iterator[FavoritesService]:
    store = FavoritesStore(request.app.state.engine)
    try:
        yield FavoritesService(
            store,
            request.app.state.catalog_cache,
            max_page_size=request.app.state.settings.favorites_max_page_size,
        )
    finally:
        store.close()


def failure_to_http(failure: Failure) -> HTTPException:
    """Translate a service Failure into the HTTPException the route raises."""
    return HTTPException(
        status_code=STATUS_BY_KIND[failure.kind],
        detail={"code": failure.kind.value, "message": failure.message},
    )
