"""
auth/service.py -- Registration, login, profile and password change.

IdentityService is request-scoped: it is built per request around a fresh
IdentityStore and the process-wide TokenIssuer. All expected outcomes come
back as Ok / Failure values (core/results.py); only unexpected errors such as
a database outage propagate as exceptions.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.exc import IntegrityError

from auth.models import Identity
from auth.store import IdentityStore
from auth.tokens import DUMMY_SALT, TokenIssuer, derive_hash, generate_salt, verify_password
from core.results import ErrorKind, Failure, Ok, Result

logger = logging.getLogger("moviesapi.auth")

EMAIL_IN_USE = "Email already in use."
# One message for unknown email and wrong password so the login response
# does not reveal which accounts exist.
INVALID_CREDENTIALS = "Invalid email or password."
USER_NOT_FOUND = "User not found."
INCORRECT_PASSWORD = "Incorrect current password."
PASSWORD_UPDATED = "Password updated successfully."
USER_CREATED = "User created successfully."


class IdentityService:
    def __init__(self, store: IdentityStore, issuer: TokenIssuer) -> None:
        self.store = store
        self.issuer = issuer

    def register(self, name: str, email: str, password: str) -> Result[Identity]:
        """Create a new identity, or fail with CONFLICT if the email is taken."""
        if self.store.find_by_email(email) is not None:
            return Failure(ErrorKind.CONFLICT, EMAIL_IN_USE)

        salt = generate_salt()
        identity = Identity(
            id=str(uuid.uuid4()),
            name=name,
            email=email,
            password_hash=derive_hash(password, salt),
            salt=salt,
        )
        try:
            self.store.insert(identity)
            self.store.commit()
        except IntegrityError:
            # A concurrent registration won the race past the pre-check.
            self.store.rollback()
            return Failure(ErrorKind.CONFLICT, EMAIL_IN_USE)

        logger.info("Registered user %s", identity.id)
        return Ok(identity, USER_CREATED)

    def authenticate(self, email: str, password: str) -> Result[str]:
        """Return a signed session token for valid credentials.

        Always runs one key derivation, even for an unknown email, so the
        two failure paths take the same time.
        """
        identity = self.store.find_by_email(email)
        if identity is None:
            verify_password(password, "", DUMMY_SALT)
            logger.info("Failed login (unknown email)")
            return Failure(ErrorKind.UNAUTHORIZED, INVALID_CREDENTIALS)
        if not verify_password(password, identity.password_hash, identity.salt):
            logger.info("Failed login for user %s", identity.id)
            return Failure(ErrorKind.UNAUTHORIZED, INVALID_CREDENTIALS)
        return Ok(self.issuer.issue(identity))

    def get_by_id(self, identity_id: str) -> Result[Identity]:
        identity = self.store.find_by_id(identity_id)
        if identity is None:
            return Failure(ErrorKind.NOT_FOUND, USER_NOT_FOUND)
        return Ok(identity)

    def update_password(self, identity_id: str, old_password: str, new_password: str) -> Result[None]:
        """Change the password after checking the current one.

        The stored salt is reused; only password_hash changes.
        """
        identity = self.store.find_by_id(identity_id)
        if identity is None:
            return Failure(ErrorKind.NOT_FOUND, USER_NOT_FOUND)
        if not verify_password(old_password, identity.password_hash, identity.salt):
            return Failure(ErrorKind.VALIDATION, INCORRECT_PASSWORD)

        identity.password_hash = derive_hash(new_password, identity.salt)
        if not self.store.update(identity):
            self.store.rollback()
            return Failure(ErrorKind.NOT_FOUND, USER_NOT_FOUND)
        self.store.commit()
        logger.info("Password changed for user %s", identity.id)
        return Ok(None, PASSWORD_UPDATED)
