"""
favorites/service.py -- List, fetch, add and remove a user's favorite movies.

FavoritesService is request-scoped around a FavoritesStore; the CatalogCache
it consumes is the single process-wide instance from the API lifespan.

Every read goes through the owner's user_id. Asking for another user's
favorite by id yields NOT_FOUND, never the record.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy.exc import IntegrityError

from cache.store import CatalogCache
from core.results import ErrorKind, Failure, Ok, Result
from favorites.models import Favorite
from favorites.store import FavoritesStore

logger = logging.getLogger("moviesapi.favorites")

MOVIE_NOT_FOUND = "Movie not found."
INVALID_MOVIE_ID = "Invalid movie ID."
ALREADY_IN_FAVORITES = "This movie is already in your favorites."
FAVORITE_ADDED = "Movie added to favorites successfully."
FAVORITE_FOUND = "Movie found in favorites."
FAVORITE_NOT_FOUND = "This movie is not in your favorites list."

DEFAULT_MAX_PAGE_SIZE = 100


class FavoritesService:
    def __init__(
        self,
        store: FavoritesStore,
        catalog: CatalogCache,
        max_page_size: int = DEFAULT_MAX_PAGE_SIZE,
    ) -> None:
        self.store = store
        self.catalog = catalog
        self.max_page_size = max_page_size

    def list(self, user_id: str, title: Optional[str] = None, page: int = 1, page_size: int = 10) -> list[Favorite]:
        """Return one page of the user's favorites, optionally filtered by title substring.

        Raises ValueError if page or page_size is below 1. page_size is
        silently capped at max_page_size.
        """
        if page < 1 or page_size < 1:
            raise ValueError(f"page and page_size must be positive, got page={page} page_size={page_size}")
        page_size = min(page_size, self.max_page_size)
        return self.store.query_by_user(
            user_id,
            title_contains=title or None,
            skip=(page - 1) * page_size,
            take=page_size,
        )

    def get_by_id(self, user_id: str, favorite_id: str) -> Result[Favorite]:
        favorite = self.store.find_by_id_for_user(user_id, favorite_id)
        if favorite is None:
            return Failure(ErrorKind.NOT_FOUND, FAVORITE_NOT_FOUND)
        return Ok(favorite, FAVORITE_FOUND)

    def add(self, user_id: str, title: str) -> Result[Favorite]:
        """Look the title up in the catalog and save it for the user.

        A duplicate comes back as CONFLICT with the stored record attached,
        whether the pre-check caught it or the unique constraint did.
        """
        entry = self.catalog.lookup(title)
        if entry is None:
            return Failure(ErrorKind.NOT_FOUND, MOVIE_NOT_FOUND)
        if not entry.catalog_id:
            return Failure(ErrorKind.VALIDATION, INVALID_MOVIE_ID)

        existing = self.store.find_by_catalog_id_for_user(user_id, entry.catalog_id)
        if existing is not None:
            return Failure(ErrorKind.CONFLICT, ALREADY_IN_FAVORITES, existing)

        candidate = Favorite(
            id=str(uuid.uuid4()),
            user_id=user_id,
            catalog_id=entry.catalog_id,
            title=entry.title,
            year=entry.year,
            director=entry.director,
            poster=entry.poster,
        )
        try:
            favorite = self.store.insert(candidate)
            self.store.commit()
        except IntegrityError:
            self.store.rollback()
            # Same title under another catalog id, or a concurrent add.
            existing = self.store.find_by_title_for_user(user_id, entry.title)
            if existing is None:
                # Not a uniqueness violation (e.g. the user no longer exists).
                raise
            return Failure(ErrorKind.CONFLICT, ALREADY_IN_FAVORITES, existing)

        logger.info("User %s added favorite %s (%s)", user_id, favorite.id, favorite.catalog_id)
        return Ok(favorite, FAVORITE_ADDED)

    def remove(self, user_id: str, favorite_id: str) -> bool:
        """Delete the user's favorite. False if it does not exist or is not theirs."""
        favorite = self.store.find_by_id_for_user(user_id, favorite_id)
        if favorite is None:
            return False
        self.store.delete(favorite)
        self.store.commit()
        return True
