"""
auth/models.py -- Domain dataclass for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in favorites/models.py -- dataclasses own domain shape; stores and services
do the work.

Layer rule: no imports from api/, favorites/, or cache/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Identity:
    """A registered user.

    email is unique and compared exactly as stored -- no case folding.
    salt is 16 random bytes generated at registration and reused for every
    later hash of this user's password (it is not rotated on password change).
    password_hash is the base64 PBKDF2 digest and is never empty once stored.
    """

    id: str
    name: str
    email: str
    password_hash: str
    salt: bytes
    created_at: str | None = None
