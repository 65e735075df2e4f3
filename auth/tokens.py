"""
auth/tokens.py -- Password hashing and session token utilities.

Security design decisions:
  Passwords: PBKDF2-HMAC-SHA256, 10000 iterations, 32-byte output, rendered
       as base64. The salt is 16 bytes from the OS CSPRNG and is stored next
       to the hash. Verification re-derives and compares with
       hmac.compare_digest so the comparison itself leaks no timing signal.

  Tokens: python-jose with HS256. Tokens carry sub (identity id), email,
       name, iat, exp, iss and aud, and expire one hour after issuance.
       decode() returns None on any failure -- the route layer turns that
       into a 401. Clock skew tolerance is zero: a token is dead at exp.

  TokenIssuer never signs with an empty key, issuer or audience. It raises
  ConfigurationError instead; the API lifespan calls validate() so a
  misconfigured process aborts at startup rather than on first login.

Layer rule: no imports from api/, favorites/, or cache/. Import from core/
is allowed -- core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import secrets
from calendar import timegm
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Callable

from jose import JWTError, jwt

from core.results import ConfigurationError

if TYPE_CHECKING:
    from auth.models import Identity
    from core.config import Settings

logger = logging.getLogger("moviesapi.auth")

_ALGORITHM = "HS256"

SALT_BYTES = 16
PBKDF2_ITERATIONS = 10000
HASH_BYTES = 32

# ---------------------------------------------------------------------------
# Password hashing (PBKDF2 via hashlib)
# ---------------------------------------------------------------------------


def derive_hash(password: str, salt: bytes) -> str:
    """Return the base64 PBKDF2-HMAC-SHA256 digest of password under salt.

    Deterministic: the same password and salt always give the same string,
    which is what verify_password() relies on.
    """
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS, dklen=HASH_BYTES)
    return base64.b64encode(digest).decode("ascii")


def generate_salt() -> bytes:
    """Return 16 cryptographically random bytes."""
    return secrets.token_bytes(SALT_BYTES)


def verify_password(password: str, password_hash: str, salt: bytes) -> bool:
    """Return True if password derives to password_hash under salt."""
    return hmac.compare_digest(derive_hash(password, salt), password_hash)


# Timing equalization salt. authenticate() derives against it when the email
# is unknown so both failure paths cost one PBKDF2 run.
DUMMY_SALT: bytes = generate_salt()


# ---------------------------------------------------------------------------
# Session tokens
# ---------------------------------------------------------------------------


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """Signs and verifies HS256 bearer tokens.

    Built once at startup and shared across requests; it holds no mutable
    state.

    Usage:
        issuer = TokenIssuer.from_settings(get_settings())
        issuer.validate()
        token = issuer.issue(identity)
        claims = issuer.decode(token)   # dict or None
    """

    def __init__(
        self,
        secret_key: str,
        issuer: str,
        audience: str,
        lifetime_seconds: int = 3600,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.secret_key = secret_key
        self.issuer = issuer
        self.audience = audience
        self.lifetime_seconds = lifetime_seconds
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenIssuer:
        return cls(
            secret_key=settings.secret_key,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            lifetime_seconds=settings.token_expire_seconds,
        )

    def validate(self) -> None:
        """Raise ConfigurationError if any signing parameter is missing."""
        missing = [
            name
            for name, value in (
                ("signing key", self.secret_key),
                ("issuer", self.issuer),
                ("audience", self.audience),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(f"Token configuration is missing: {', '.join(missing)}.")

    def issue(self, identity: Identity) -> str:
        """Encode a signed token for identity, valid for lifetime_seconds."""
        self.validate()
        now = self._clock()
        payload = {
            "sub": identity.id,
            "email": identity.email,
            "name": identity.name,
            "iat": now,
            "exp": now + timedelta(seconds=self.lifetime_seconds),
            "iss": self.issuer,
            "aud": self.audience,
        }
        return jwt.encode(payload, self.secret_key, algorithm=_ALGORITHM)

    def decode(self, token: str) -> dict | None:
        """Verify a token and return its claims, or None on any failure.

        python-jose accepts a token in the very second its exp is reached; the
        explicit exp check below closes that gap so there is no grace window.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[_ALGORITHM],
                audience=self.audience,
                issuer=self.issuer,
            )
        except JWTError:
            return None
        if "sub" not in payload or "exp" not in payload:
            return None
        if payload["exp"] <= timegm(self._clock().utctimetuple()):
            return None
        return payload
