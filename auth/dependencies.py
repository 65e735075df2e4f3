"""
auth/dependencies.py -- FastAPI Depends() helpers for bearer authentication.

Only the Authorization: Bearer <token> header is accepted. The token is
verified by the process-wide TokenIssuer on app.state (signature, issuer,
audience, expiry with zero skew). The dependency does not hit the database:
the subject claim is trusted for the token's lifetime, as there is no
revocation list.

try_get_current_user_id() is the soft variant (returns None on failure).
get_current_user_id() wraps it and raises HTTP 401 if unauthenticated.

Layer rule: no imports from api/, favorites/, or cache/.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.tokens import TokenIssuer


def try_get_current_user_id(request: Request) -> str | None:
    """Return the identity id from a valid bearer token, or None."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    issuer: TokenIssuer = request.app.state.token_issuer
    payload = issuer.decode(auth_header[7:])
    if payload is None:
        return None
    return payload["sub"]


def get_current_user_id(request: Request) -> str:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user_id: str = Depends(get_current_user_id)): ...
    """
    user_id = try_get_current_user_id(request)
    if user_id is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id
