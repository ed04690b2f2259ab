"""Tests for access and refresh tokens."""
from datetime import timedelta

from app.infra.security.jwt import create_access_token, create_refresh_token, decode_token, user_id_from_token


def test_access_token_carries_user_id():
    token = create_access_token({"sub": 42})

    payload = decode_token(token)
    assert payload["sub"] == "42"
    assert payload["type"] == "access"
    assert user_id_from_token(token) == 42


def test_token_types_are_not_interchangeable():
    refresh = create_refresh_token({"sub": 7})

    assert user_id_from_token(refresh, "refresh") == 7
    assert user_id_from_token(refresh, "access") is None


def test_expired_and_tampered_tokens_rejected():
    expired = create_access_token({"sub": 1}, expires_delta=timedelta(minutes=-1))
    assert user_id_from_token(expired) is None

    header, _, signature = create_access_token({"sub": 1}).split(".")
    forged_payload = create_access_token({"sub": 2}).split(".")[1]
    assert user_id_from_token(f"{header}.{forged_payload}.{signature}") is None
    assert user_id_from_token("") is None
