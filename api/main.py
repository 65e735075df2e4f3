"""
api/main.py -- FastAPI application entry point for the Movies API.

Run with:  uvicorn api.main:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware     -- adds CORS headers for allowed browser origins
  2. SlowAPIMiddleware  -- enforces per-route rate limits from api.limiter

Lifespan handles startup (settings, token issuer check, database engine,
catalog cache, purge task) and shutdown (cancel purge task, close the OMDb
session, dispose the engine) symmetrically.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

# Store modules register their tables on core.db.metadata at import time.
import auth.store  # noqa: F401
import favorites.store  # noqa: F401
from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.favorites import router as favorites_router
from api.routes.v1.users import router as users_router
from auth.tokens import TokenIssuer
from cache.store import CatalogCache
from core.config import get_settings
from core.db import create_db_engine
from core.fetcher import OmdbClient

API_VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("moviesapi.api")

# ---------------------------------------------------------------------------
# Background purge task
# ---------------------------------------------------------------------------


async def _purge_loop(app: FastAPI, interval: int) -> None:
    """Sweep expired catalog cache records every `interval` seconds.

    Expired records are already invisible to lookups; this only bounds memory.
    CancelledError from task.cancel() during shutdown propagates out of
    asyncio.sleep and unwinds the coroutine cleanly.
    """
    while True:
        await asyncio.sleep(interval)
        removed = app.state.catalog_cache.purge_expired()
        if removed:
            logger.info("Purged %d expired catalog cache records", removed)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application-level resources across the full server lifetime.

    Startup order matters:
      1. Settings and token issuer first -- a missing signing key, issuer or
         audience raises ConfigurationError and aborts startup before any
         request can be served.
      2. Database engine -- creates tables on first run.
      3. Catalog cache -- wraps the OMDb client; one instance for the process.
      4. Purge task last -- references app.state.catalog_cache.
    """
    settings = get_settings()
    app.state.settings = settings

    token_issuer = TokenIssuer.from_settings(settings)
    token_issuer.validate()
    app.state.token_issuer = token_issuer

    app.state.engine = create_db_engine(settings.database_url)
    logger.info("Database initialized")

    omdb = OmdbClient(
        api_key=settings.omdb_api_key,
        base_url=settings.omdb_base_url,
        timeout=settings.omdb_timeout_seconds,
    )
    if not omdb.configured:
        logger.warning("OMDB_API_KEY not set -- every catalog lookup will report 'movie not found'")
    app.state.catalog_cache = CatalogCache(omdb, ttl=settings.catalog_cache_ttl_seconds)
    logger.info("Catalog cache initialized (ttl=%ds)", settings.catalog_cache_ttl_seconds)

    app.state.purge_task = asyncio.create_task(_purge_loop(app, settings.cache_purge_interval_seconds))

    yield

    app.state.purge_task.cancel()
    omdb.close()
    app.state.engine.dispose()
    logger.info("Movies API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Movies API",
    description="User accounts with bearer-token sessions and a per-user list of favorite movies from OMDb.",
    version=API_VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(users_router, prefix="/api/v1", tags=["Users"])
app.include_router(favorites_router, prefix="/api/v1", tags=["Favorites"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a structured error when a rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    response = JSONResponse(
        status_code=429,
        content=ErrorResponse(
            error=ErrorDetail(
                code="rate_limited",
                message="Too many requests.",
                detail=str(exc),
            )
        ).model_dump(),
    )
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 with structured error when request body or params fail validation."""
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message="Request validation failed.",
                detail=str(exc.errors()),
            )
        ).model_dump(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions.

    Route handlers raise HTTPException with a dict detail ({"code", "message"}).
    When detail is already structured, use it directly as the error field.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=exc.headers,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The full traceback goes to the log for operators; the client receives only
    a generic message with no internal detail.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="internal_error",
                message="An unexpected error occurred.",
            )
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Health endpoint
#
# No rate limit applied -- health checks from load balancers and monitoring
# systems must not be throttled.
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", include_in_schema=True, tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return API liveness, version, and a database round-trip check."""
    components = {"app": "ok", "database": "ok"}
    try:
        with request.app.state.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check database probe failed")
        components["database"] = "error"
    return HealthResponse(version=API_VERSION, components=components)
