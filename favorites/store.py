"""
favorites/store.py -- SQLAlchemy Core persistence layer for favorites.

Pattern: Repository + Data Mapper. FavoritesStore is the repository;
_row_to_favorite is the mapper.

Constraints enforced by the database, not by code:
  UNIQUE(user_id, title)  -- a user cannot save the same title twice, even
                             under a different catalog id.
  FOREIGN KEY(user_id) -> users.id ON DELETE CASCADE

insert() lets IntegrityError propagate; the service turns it into a conflict.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = FavoritesStore(engine)
    store.insert(favorite)
    store.commit()
    page = store.query_by_user(user_id, title_contains="Dark", skip=10, take=10)
    store.close()
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, ForeignKey, Integer, String, Table, UniqueConstraint

import auth.store  # noqa: F401 -- registers the users table the foreign key references
from core.db import ConnectionScope, metadata
from favorites.models import Favorite

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

favorites = Table(
    "favorites",
    metadata,
    # seq gives a stable insertion order; id is the public identifier.
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("id", String(36), nullable=False, unique=True),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("catalog_id", String(20), nullable=False),
    Column("title", String(255), nullable=False),
    Column("year", String(20), nullable=False, server_default=""),
    Column("director", String(255), nullable=False, server_default=""),
    Column("poster", String(1024), nullable=False, server_default=""),
    Column("created_at", String(32), nullable=False),
    UniqueConstraint("user_id", "title", name="uq_favorite_user_title"),
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class FavoritesStore(ConnectionScope):
    """Repository for Favorite entities. Every read is scoped to one user."""

    def query_by_user(
        self,
        user_id: str,
        title_contains: Optional[str] = None,
        skip: int = 0,
        take: Optional[int] = None,
    ) -> list[Favorite]:
        """Return a user's favorites in insertion order.

        title_contains is a case-sensitive substring match. SQL LIKE is
        case-insensitive on SQLite, so it only narrows the candidate rows and
        the exact containment check runs here. skip/take apply after the
        filter.
        """
        stmt = favorites.select().where(favorites.c.user_id == user_id).order_by(favorites.c.seq)
        if title_contains:
            stmt = stmt.where(favorites.c.title.contains(title_contains, autoescape=True))
        rows = self.conn.execute(stmt).fetchall()
        items = [_row_to_favorite(r) for r in rows]
        if title_contains:
            items = [f for f in items if title_contains in f.title]
        end = skip + take if take is not None else None
        return items[skip:end]

    def find_by_id_for_user(self, user_id: str, favorite_id: str) -> Favorite | None:
        """Return the favorite only if it belongs to user_id."""
        row = self.conn.execute(
            favorites.select().where((favorites.c.id == favorite_id) & (favorites.c.user_id == user_id))
        ).fetchone()
        return _row_to_favorite(row) if row is not None else None

    def find_by_catalog_id_for_user(self, user_id: str, catalog_id: str) -> Favorite | None:
        row = self.conn.execute(
            favorites.select().where((favorites.c.user_id == user_id) & (favorites.c.catalog_id == catalog_id))
        ).fetchone()
        return _row_to_favorite(row) if row is not None else None

    def find_by_title_for_user(self, user_id: str, title: str) -> Favorite | None:
        """Exact title match -- the key of the uniqueness constraint."""
        row = self.conn.execute(
            favorites.select().where((favorites.c.user_id == user_id) & (favorites.c.title == title))
        ).fetchone()
        return _row_to_favorite(row) if row is not None else None

    def insert(self, favorite: Favorite) -> Favorite:
        """Stage a new favorite and return it with created_at filled in.

        Raises sqlalchemy.exc.IntegrityError on a duplicate (user_id, title)
        or an unknown user_id.
        """
        created_at = favorite.created_at or _now_iso()
        self.conn.execute(
            favorites.insert().values(
                id=favorite.id,
                user_id=favorite.user_id,
                catalog_id=favorite.catalog_id,
                title=favorite.title,
                year=favorite.year,
                director=favorite.director,
                poster=favorite.poster,
                created_at=created_at,
            )
        )
        return replace(favorite, created_at=created_at)

    def delete(self, favorite: Favorite) -> bool:
        """Delete a favorite. user_id is part of the WHERE clause (IDOR guard)."""
        result = self.conn.execute(
            favorites.delete().where((favorites.c.id == favorite.id) & (favorites.c.user_id == favorite.user_id))
        )
        return result.rowcount > 0


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_favorite(row) -> Favorite:
    return Favorite(
        id=row.id,
        user_id=row.user_id,
        catalog_id=row.catalog_id,
        title=row.title,
        year=row.year or "",
        director=row.director or "",
        poster=row.poster or "",
        created_at=row.created_at,
    )
