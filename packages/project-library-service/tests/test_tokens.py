"""JWT helpers and password hashing."""

from __future__ import annotations

import uuid
from datetime import timedelta

import jwt
import pytest

from project_library_service.auth.credentials import (
    hash_password,
    normalize_email,
    verify_password,
)
from project_library_service.auth.jwt import (
    ACCESS,
    REFRESH,
    SWITCH,
    create_access_token,
    create_refresh_token,
    create_switch_token,
    decode_token,
)


def test_access_token_round_trip_without_active_owner():
    person_id = uuid.uuid4()
    payload = decode_token(create_access_token(person_id, "ada@example.com"), ACCESS)
    assert payload["sub"] == str(person_id)
    assert payload["email"] == "ada@example.com"
    assert "act" not in payload


def test_access_token_carries_active_owner_claim():
    owner_id = uuid.uuid4()
    token = create_access_token(uuid.uuid4(), "ada@example.com", active_owner_id=owner_id)
    assert decode_token(token)["act"] == str(owner_id)


def test_refresh_token_is_not_an_access_token():
    token = create_refresh_token(uuid.uuid4())
    assert decode_token(token, REFRESH)["type"] == REFRESH
    with pytest.raises(jwt.InvalidTokenError):
        decode_token(token, ACCESS)


def test_switch_token_names_person_and_owner():
    person_id, owner_id = uuid.uuid4(), uuid.uuid4()
    payload = decode_token(create_switch_token(person_id, owner_id), SWITCH)
    assert payload["sub"] == str(person_id)
    assert payload["act"] == str(owner_id)


def test_expired_token_is_rejected():
    token = create_access_token(
        uuid.uuid4(), "ada@example.com", expires_delta=timedelta(seconds=-1)
    )
    with pytest.raises(jwt.ExpiredSignatureError):
        decode_token(token)


def test_tampered_token_is_rejected():
    token = create_access_token(uuid.uuid4(), "ada@example.com")
    header, payload, signature = token.split(".")
    with pytest.raises(jwt.PyJWTError):
        decode_token(f"{header}.{payload}.{signature[::-1]}")


class TestCredentials:
    def test_hash_and_verify(self) -> None:
        hashed = hash_password("correct-horse")
        assert hashed != "correct-horse"
        assert verify_password("correct-horse", hashed) is True
        assert verify_password("wrong-horse", hashed) is False

    def test_overlong_password_never_verifies(self) -> None:
        hashed = hash_password("x" * 72)
        assert verify_password("x" * 73, hashed) is False

    def test_normalize_email(self) -> None:
        assert normalize_email("  Ada@Example.COM ") == "ada@example.com"
