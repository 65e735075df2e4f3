"""
API request and response models for the Movies API REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
favorites/models.py, which own the internal domain representation. Route
handlers map between the two.

Field constraints here are the request validation boundary: anything that
reaches a service has already passed them.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import Identity
from favorites.models import Favorite

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Deliberately loose: one "@", something on each side, a dot in the domain.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

PASSWORD_MIN_LENGTH = 6


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=255)


class LoginRequest(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=255)


class UpdatePasswordRequest(BaseModel):
    old_password: str = Field(min_length=1, max_length=255)
    new_password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=255)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public view of an identity -- never includes hash or salt."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str

    @classmethod
    def from_identity(cls, identity: Identity) -> "UserResponse":
        return cls(id=identity.id, name=identity.name, email=identity.email)


class RegisterResponse(BaseModel):
    message: str
    user: UserResponse


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class MessageResponse(BaseModel):
    message: str


class FavoriteResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    catalog_id: str
    title: str
    year: str
    director: str
    poster: str
    created_at: str

    @classmethod
    def from_favorite(cls, favorite: Favorite) -> "FavoriteResponse":
        """Factory Method -- the mapping lives next to the output model."""
        return cls(
            id=favorite.id,
            catalog_id=favorite.catalog_id,
            title=favorite.title,
            year=favorite.year,
            director=favorite.director,
            poster=favorite.poster,
            created_at=favorite.created_at,
        )


class FavoriteEnvelope(BaseModel):
    message: str
    favorite: FavoriteResponse


class ErrorDetail(BaseModel):
    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    error: ErrorDetail


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
