"""
auth/store.py -- SQLAlchemy Core persistence layer for identities.

Pattern: Repository + Data Mapper (same as favorites/store.py).
IdentityStore is the repository; _row_to_identity is the mapper. Service and
route code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  UNIQUE(email) is enforced by the database. insert() lets IntegrityError
  propagate so the service can translate a lost check-then-insert race into
  the same conflict a pre-check would have reported.

Layer rule: no imports from api/, favorites/, or cache/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, LargeBinary, String, Table, Text

from auth.models import Identity
from core.db import ConnectionScope, metadata

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

users = Table(
    "users",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(100), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("salt", LargeBinary(16), nullable=False),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class IdentityStore(ConnectionScope):
    """Repository for Identity entities.

    Usage:
        store = IdentityStore(engine)
        store.insert(identity)
        store.commit()
        found = store.find_by_email("ana@x.com")
        store.close()
    """

    def find_by_email(self, email: str) -> Identity | None:
        """Look up an identity by exact email (case-sensitive). Returns None if not found."""
        row = self.conn.execute(users.select().where(users.c.email == email)).fetchone()
        return _row_to_identity(row) if row is not None else None

    def find_by_id(self, identity_id: str) -> Identity | None:
        """Look up an identity by primary key. Returns None if not found."""
        row = self.conn.execute(users.select().where(users.c.id == identity_id)).fetchone()
        return _row_to_identity(row) if row is not None else None

    def insert(self, identity: Identity) -> None:
        """Stage a new identity. Visible to other connections after commit().

        Raises sqlalchemy.exc.IntegrityError if the email already exists.
        created_at is stamped here when the caller left it empty.
        """
        if not identity.created_at:
            identity.created_at = _now_iso()
        self.conn.execute(
            users.insert().values(
                id=identity.id,
                name=identity.name,
                email=identity.email,
                password_hash=identity.password_hash,
                salt=identity.salt,
                created_at=identity.created_at,
            )
        )

    def update(self, identity: Identity) -> bool:
        """Write the mutable fields (name, password_hash) back.

        Email and salt are never rewritten. Returns True if a row was
        updated, False if the id was not found.
        """
        result = self.conn.execute(
            users.update()
            .where(users.c.id == identity.id)
            .values(name=identity.name, password_hash=identity.password_hash)
        )
        return result.rowcount > 0

    def delete(self, identity_id: str) -> bool:
        """Delete an identity. Favorites owned by it go with it (ON DELETE CASCADE).

        Returns True if deleted, False if not found.
        """
        result = self.conn.execute(users.delete().where(users.c.id == identity_id))
        return result.rowcount > 0


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_identity(row) -> Identity:
    return Identity(
        id=row.id,
        name=row.name,
        email=row.email,
        password_hash=row.password_hash,
        salt=bytes(row.salt),
        created_at=row.created_at,
    )
