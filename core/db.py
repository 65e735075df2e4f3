"""
core/db.py -- Shared SQLAlchemy Core wiring for the identity and favorites stores.

Uses SQLAlchemy Core (not ORM) so the domain dataclasses in auth/models.py and
favorites/models.py remain the authoritative domain representation. Swapping
SQLite for PostgreSQL is a connection string change, not a rewrite.

Both stores register their tables on the module-level `metadata` below when
they are imported, and share one engine, so the favorites -> users foreign key
(ON DELETE CASCADE) lives in a single database.

Lifecycle:
  engine  -- process-wide, created once in the API lifespan.
  store   -- request-scoped. Each store checks out one connection on first use
             and holds it until close(). Writes are visible to other requests
             only after commit(); close() without commit rolls back.
"""

from __future__ import annotations

from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Connection, Engine

metadata = MetaData()


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign key enforcement.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool. foreign_keys is off by default in SQLite,
    which would silently skip the favorites cascade.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(db_url: str) -> Engine:
    """Create the engine and every table registered on `metadata`.

    Import auth.store and favorites.store before calling this so their tables
    are part of the schema.
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_sqlite_pragmas)
    metadata.create_all(engine)
    return engine


class ConnectionScope:
    """Request-scoped connection holder shared by the repository classes.

    Usage:
        store = IdentityStore(engine)
        store.insert(identity)
        store.commit()
        store.close()
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._conn: Connection | None = None

    @property
    def conn(self) -> Connection:
        if self._conn is None:
            self._conn = self.engine.connect()
        return self._conn

    def commit(self) -> None:
        if self._conn is not None:
            self._conn.commit()

    def rollback(self) -> None:
        if self._conn is not None:
            self._conn.rollback()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
