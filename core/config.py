"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for the Movies API happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. secret_key -> SECRET_KEY, omdb_api_key -> OMDB_API_KEY).

  @model_validator(mode="after"): Runs cross-field validation after all fields
      are resolved. Dev mode generates a signing key with a warning,
      production mode refuses to start without one.

Security notes:
  SECRET_KEY shorter than 32 chars is rejected outright. HS256 token signing
  relies on key entropy -- a short key weakens every issued session.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, favorites/, or cache/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("moviesapi.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'moviesapi.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file. The model_validator enforces
    production-safety rules at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Session tokens
    # ------------------------------------------------------------------

    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = ""
    jwt_issuer: str = "MoviesApi"
    jwt_audience: str = "MoviesApiUsers"
    token_expire_seconds: int = 3600

    # ------------------------------------------------------------------
    # OMDb catalog
    # ------------------------------------------------------------------

    # Empty api key means every lookup is a miss (logged at startup).
    omdb_api_key: str = ""
    omdb_base_url: str = "https://www.omdbapi.com/"
    omdb_timeout_seconds: float = 10.0
    catalog_cache_ttl_seconds: int = 600
    cache_purge_interval_seconds: int = 3600

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    favorites_max_page_size: int = 100

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    login_rate_limit: str = "10/minute"
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy.

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Sessions will not survive restart -- acceptable for local dev.

        Production mode (DEBUG=false or not set): refuse to start if
            SECRET_KEY is missing.

        Both modes: reject keys shorter than 32 characters.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning(
                    "WARNING: Using auto-generated SECRET_KEY. " "Sessions will not persist across restarts."
                )
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
