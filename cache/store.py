"""
cache/store.py -- In-process cache-aside wrapper around the catalog client.

Avoids redundant OMDb calls by keeping positive lookups in memory for a
configurable TTL (default 10 minutes). One CatalogCache is built in the API
lifespan and shared by every request through app.state.

Rules:
  - Keys are the exact title string. No case folding, no trimming.
  - Only entries with a non-empty title are stored. A miss is never cached,
    so every lookup for an unknown title reaches the client again.
  - A record is served only while now < expires_at. Expired records are
    treated as absent and overwritten on the next successful fetch;
    purge_expired() removes them in bulk.
  - No locking. Writes are single dict assignments (last write wins) of
    immutable values; two concurrent misses for the same title may both call
    the client, which is harmless because the call is side-effect free.

Usage:
    cache = CatalogCache(OmdbClient(api_key="..."))
    entry = cache.lookup("Inception")   # CatalogEntry or None
    cache.purge_expired()               # call periodically to trim old entries
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from core.models import CatalogEntry

logger = logging.getLogger("moviesapi.cache")

_DEFAULT_TTL = 60 * 10  # 10 minutes in seconds


class CatalogClient(Protocol):
    def fetch_by_title(self, title: str) -> Optional[CatalogEntry]: ...


@dataclass(frozen=True)
class CacheRecord:
    key: str
    value: CatalogEntry
    expires_at: float


class CatalogCache:
    def __init__(
        self,
        client: CatalogClient,
        ttl: int = _DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.ttl = ttl
        self._clock = clock
        self._records: dict[str, CacheRecord] = {}

    def lookup(self, title: str) -> Optional[CatalogEntry]:
        """Return the entry for title, from cache when live, else from the client."""
        cached = self.get(title)
        if cached is not None:
            logger.info("Cache hit for %r", title)
            return cached

        logger.info("Cache miss for %r, querying catalog", title)
        entry = self.client.fetch_by_title(title)
        if entry is None or not entry.title:
            logger.info("Catalog has no entry for %r", title)
            return None

        self.set(title, entry)
        return entry

    def get(self, title: str) -> Optional[CatalogEntry]:
        """Return the cached entry if present and not expired."""
        record = self._records.get(title)
        if record is None or self._clock() >= record.expires_at:
            return None
        return record.value

    def set(self, title: str, entry: CatalogEntry) -> None:
        """Store entry under title, replacing any existing record."""
        self._records[title] = CacheRecord(key=title, value=entry, expires_at=self._clock() + self.ttl)

    def purge_expired(self) -> int:
        """Drop all expired records. Returns number of records removed."""
        now = self._clock()
        removed = 0
        for key, record in list(self._records.items()):
            if now >= record.expires_at:
                self._records.pop(key, None)
                removed += 1
        return removed

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)
