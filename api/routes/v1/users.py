"""
api/routes/v1/users.py -- Registration, login, profile and password change.

Routes:
  POST /api/v1/users/register          -- create an account (public)
  POST /api/v1/users/login             -- exchange credentials for a bearer token (public)
  GET  /api/v1/users/me                -- current user's profile (requires auth)
  PUT  /api/v1/users/update-password   -- change password (requires auth)

Security:
  POST /login is rate-limited per client IP (LOGIN_RATE_LIMIT, default 10/minute).
  POST /login returns the same 401 body for unknown email and wrong password.
  Cache-Control: no-store on login responses so tokens are not cached.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.dependencies import failure_to_http, get_identity_service
from api.limiter import limiter, login_rate_limit
from api.models import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    UpdatePasswordRequest,
    UserResponse,
)
from auth.dependencies import get_current_user_id
from auth.service import IdentityService
from core.results import Failure

router = APIRouter()


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/users/register", response_model=RegisterResponse, status_code=201)
def register(body: RegisterRequest, service: IdentityService = Depends(get_identity_service)) -> RegisterResponse:
    """Create an account. 409 if the email is already registered."""
    result = service.register(body.name, body.email, body.password)
    if isinstance(result, Failure):
        raise failure_to_http(result)
    return RegisterResponse(message=result.message, user=UserResponse.from_identity(result.value))


@limiter.limit(login_rate_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/users/login", response_model=LoginResponse)
def login(
    request: Request,
    body: LoginRequest,
    service: IdentityService = Depends(get_identity_service),
) -> JSONResponse:
    """Authenticate with email and password; return a bearer token valid for one hour."""
    result = service.authenticate(body.email, body.password)
    if isinstance(result, Failure):
        resp = JSONResponse(
            status_code=401,
            content={"error": {"code": result.kind.value, "message": result.message}},
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            access_token=result.value,
            token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
            expires_in=service.issuer.lifetime_seconds,
        ).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/users/me", response_model=UserResponse)
def me(
    user_id: str = Depends(get_current_user_id),
    service: IdentityService = Depends(get_identity_service),
) -> UserResponse:
    """Return the profile of the authenticated user. 404 if the account was removed."""
    result = service.get_by_id(user_id)
    if isinstance(result, Failure):
        raise failure_to_http(result)
    return UserResponse.from_identity(result.value)


@router.put("/users/update-password", response_model=MessageResponse)
def update_password(
    body: UpdatePasswordRequest,
    user_id: str = Depends(get_current_user_id),
    service: IdentityService = Depends(get_identity_service),
) -> MessageResponse:
    """Change the password. 400 if the current password is wrong."""
    result = service.update_password(user_id, body.old_password, body.new_password)
    if isinstance(result, Failure):
        raise failure_to_http(result)
    return MessageResponse(message=result.message)
