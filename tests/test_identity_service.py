"""
tests/test_identity_service.py -- Unit tests for auth/service.py and auth/store.py.

Covers:
  - register: new account, duplicate email, lost insert race (IntegrityError)
  - authenticate: token for valid credentials, one failure message for both
    unknown email and wrong password
  - get_by_id / update_password, including the salt staying unchanged
  - IdentityStore round trip of the binary salt
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from auth.models import Identity
from auth.service import (
    EMAIL_IN_USE,
    INCORRECT_PASSWORD,
    INVALID_CREDENTIALS,
    PASSWORD_UPDATED,
    USER_CREATED,
    USER_NOT_FOUND,
    IdentityService,
)
from auth.tokens import verify_password
from core.results import ErrorKind, Failure, Ok


@pytest.fixture
def service(identity_store, token_issuer) -> IdentityService:
    return IdentityService(identity_store, token_issuer)


class TestRegister:
    def test_register_returns_identity(self, service):
        result = service.register("Ana", "ana@x.com", "secret1")
        assert isinstance(result, Ok)
        assert result.message == USER_CREATED
        identity = result.value
        assert identity.name == "Ana"
        assert identity.email == "ana@x.com"
        assert len(identity.id) == 36
        assert len(identity.salt) == 16
        assert identity.created_at

    def test_password_is_stored_hashed(self, service, identity_store):
        identity = service.register("Ana", "ana@x.com", "secret1").value
        stored = identity_store.find_by_email("ana@x.com")
        assert stored is not None
        assert stored.password_hash != "secret1"
        assert stored.salt == identity.salt
        assert verify_password("secret1", stored.password_hash, stored.salt)

    def test_duplicate_email_conflicts(self, service):
        service.register("Ana", "ana@x.com", "secret1")
        result = service.register("Other Ana", "ana@x.com", "different")
        assert isinstance(result, Failure)
        assert result.kind is ErrorKind.CONFLICT
        assert result.message == EMAIL_IN_USE

    def test_email_match_is_case_sensitive(self, service):
        service.register("Ana", "ana@x.com", "secret1")
        assert isinstance(service.register("Ana", "Ana@x.com", "secret1"), Ok)

    def test_lost_race_reported_as_conflict(self, token_issuer):
        """Pre-check passed but the unique index fired -- same CONFLICT, transaction rolled back."""
        store = MagicMock()
        store.find_by_email.return_value = None
        store.insert.side_effect = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
        svc = IdentityService(store, token_issuer)

        result = svc.register("Ana", "ana@x.com", "secret1")

        assert isinstance(result, Failure)
        assert result.kind is ErrorKind.CONFLICT
        store.rollback.assert_called_once()
        store.commit.assert_not_called()


class TestAuthenticate:
    def test_valid_credentials_return_token(self, service, token_issuer):
        identity = service.register("Ana", "ana@x.com", "secret1").value
        result = service.authenticate("ana@x.com", "secret1")
        assert isinstance(result, Ok)
        claims = token_issuer.decode(result.value)
        assert claims["sub"] == identity.id
        assert claims["email"] == "ana@x.com"

    def test_wrong_password_and_unknown_email_look_identical(self, service):
        service.register("Ana", "ana@x.com", "secret1")
        wrong_pw = service.authenticate("ana@x.com", "nope")
        unknown = service.authenticate("nobody@x.com", "secret1")
        for result in (wrong_pw, unknown):
            assert isinstance(result, Failure)
            assert result.kind is ErrorKind.UNAUTHORIZED
            assert result.message == INVALID_CREDENTIALS

    def test_unknown_email_still_derives_a_hash(self, token_issuer, monkeypatch):
        store = MagicMock()
        store.find_by_email.return_value = None
        calls = []
        monkeypatch.setattr("auth.service.verify_password", lambda *a: calls.append(a) or False)

        IdentityService(store, token_issuer).authenticate("nobody@x.com", "secret1")

        assert len(calls) == 1


class TestGetById:
    def test_found(self, service):
        identity = service.register("Ana", "ana@x.com", "secret1").value
        result = service.get_by_id(identity.id)
        assert isinstance(result, Ok)
        assert result.value.email == "ana@x.com"

    def test_missing(self, service):
        result = service.get_by_id("00000000-0000-0000-0000-000000000000")
        assert isinstance(result, Failure)
        assert result.kind is ErrorKind.NOT_FOUND
        assert result.message == USER_NOT_FOUND


class TestUpdatePassword:
    def test_change_password(self, service):
        identity = service.register("Ana", "ana@x.com", "secret1").value
        result = service.update_password(identity.id, "secret1", "newpass")
        assert isinstance(result, Ok)
        assert result.message == PASSWORD_UPDATED
        assert isinstance(service.authenticate("ana@x.com", "newpass"), Ok)
        assert isinstance(service.authenticate("ana@x.com", "secret1"), Failure)

    def test_salt_is_kept(self, service, identity_store):
        identity = service.register("Ana", "ana@x.com", "secret1").value
        service.update_password(identity.id, "secret1", "newpass")
        assert identity_store.find_by_id(identity.id).salt == identity.salt

    def test_wrong_current_password(self, service):
        identity = service.register("Ana", "ana@x.com", "secret1").value
        result = service.update_password(identity.id, "wrong", "newpass")
        assert isinstance(result, Failure)
        assert result.kind is ErrorKind.VALIDATION
        assert result.message == INCORRECT_PASSWORD
        assert isinstance(service.authenticate("ana@x.com", "secret1"), Ok)

    def test_unknown_user(self, service):
        result = service.update_password("00000000-0000-0000-0000-000000000000", "secret1", "newpass")
        assert isinstance(result, Failure)
        assert result.kind is ErrorKind.NOT_FOUND


class TestIdentityStore:
    def test_insert_and_find(self, identity_store):
        identity = Identity(
            id="11111111-1111-1111-1111-111111111111",
            name="Bo",
            email="bo@x.com",
            password_hash="aGFzaA==",
            salt=b"\x00" * 16,
        )
        identity_store.insert(identity)
        identity_store.commit()

        found = identity_store.find_by_id(identity.id)
        assert found is not None
        assert found.salt == b"\x00" * 16
        assert found.created_at == identity.created_at

    def test_duplicate_email_raises_integrity_error(self, identity_store):
        first = Identity("11111111-1111-1111-1111-111111111111", "Bo", "bo@x.com", "h", b"\x01" * 16)
        second = Identity("22222222-2222-2222-2222-222222222222", "Bo2", "bo@x.com", "h", b"\x02" * 16)
        identity_store.insert(first)
        identity_store.commit()
        with pytest.raises(IntegrityError):
            identity_store.insert(second)
        identity_store.rollback()

    def test_delete(self, identity_store):
        identity = Identity("11111111-1111-1111-1111-111111111111", "Bo", "bo@x.com", "h", b"\x01" * 16)
        identity_store.insert(identity)
        identity_store.commit()
        assert identity_store.delete(identity.id) is True
        identity_store.commit()
        assert identity_store.find_by_id(identity.id) is None
        assert identity_store.delete(identity.id) is False
