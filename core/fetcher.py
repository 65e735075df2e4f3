"""
fetcher.py -- External catalog fetching (OMDb).

OmdbClient performs exactly one blocking HTTP call per fetch_by_title(). It has
no cache of its own; cache/store.py wraps it. Every failure mode -- missing
configuration, transport error, non-2xx status, unreadable body, "movie not
found" -- comes back as None. The two cases "not in the catalog" and "catalog
unreachable" are deliberately not distinguished at this interface, and no
retry is attempted.
"""

import logging
from typing import Any, Optional

import requests

from core.models import CatalogEntry
from core.results import ExternalLookupFailure

logger = logging.getLogger("moviesapi.fetcher")

OMDB_API = "https://www.omdbapi.com/"


def _new_session() -> requests.Session:
    # max_redirects=3 replaces the requests default of 30 -- OMDb is a known
    # public API, 3 hops is generous and protects against redirect chains.
    session = requests.Session()
    session.max_redirects = 3
    return session


class OmdbClient:
    """Blocking OMDb title lookup.

    Usage:
        client = OmdbClient(api_key="abc123")
        entry = client.fetch_by_title("Inception")   # CatalogEntry or None
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = OMDB_API,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        # One session per client for connection pooling across lookups.
        self._session = session if session is not None else _new_session()

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.base_url)

    def fetch_by_title(self, title: str) -> Optional[CatalogEntry]:
        """Return the catalog entry for an exact title, or None."""
        if not self.configured:
            logger.error("OMDb API key or base URL is missing; lookup for %r skipped", title)
            return None

        try:
            payload = self._get_json({"t": title, "apikey": self.api_key})
        except ExternalLookupFailure as e:
            logger.warning("OMDb fetch failed for %r: %s", title, e)
            return None

        if payload.get("Response") == "False":
            logger.info("OMDb has no match for %r: %s", title, payload.get("Error", ""))
            return None

        entry = _payload_to_entry(payload)
        if not entry.title:
            logger.warning("OMDb returned an entry without a title for %r", title)
            return None
        return entry

    def _get_json(self, params: dict[str, str]) -> dict[str, Any]:
        try:
            resp = self._session.get(self.base_url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise ExternalLookupFailure(str(e)) from e
        if not isinstance(data, dict):
            raise ExternalLookupFailure(f"unexpected response type {type(data).__name__}")
        return data

    def close(self) -> None:
        self._session.close()


def _payload_to_entry(payload: dict[str, Any]) -> CatalogEntry:
    # OMDb uses "N/A" for absent fields; keep it as-is, it is what users see.
    return CatalogEntry(
        title=str(payload.get("Title") or ""),
        year=str(payload.get("Year") or ""),
        director=str(payload.get("Director") or ""),
        poster=str(payload.get("Poster") or ""),
        catalog_id=str(payload.get("imdbID") or ""),
    )
