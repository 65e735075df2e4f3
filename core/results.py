"""
core/results.py -- Outcome types shared by the identity and favorites services.

Expected domain outcomes (conflict, bad credentials, not found, invalid input)
are returned as values, not raised. A service method returns either Ok(value)
or Failure(kind, message). The HTTP layer maps ErrorKind 1:1 onto a status
code; nothing else needs to inspect the message text.

Exceptions are reserved for conditions a request cannot recover from:
ConfigurationError (fatal at startup) and ExternalLookupFailure (raised and
caught inside the catalog client, never seen by callers).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    VALIDATION = "validation_error"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    message: str = ""


@dataclass(frozen=True)
class Failure(Generic[T]):
    """A typed failure with a user-facing message.

    existing carries the record that caused a conflict, so callers can show
    it instead of treating the conflict as a dead end.
    """

    kind: ErrorKind
    message: str
    existing: Optional[T] = None


Result = Union[Ok[T], Failure[T]]


class ConfigurationError(RuntimeError):
    """Required configuration (signing key, issuer, audience) is missing."""


class ExternalLookupFailure(Exception):
    """The catalog request failed in transport or returned an unreadable body."""
