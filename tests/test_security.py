"""Tests for password hashing and JWT handling."""

from datetime import timedelta

import jwt
import pytest

from flightmate.utils.security import (
    EXPIRED_TOKEN_MESSAGE,
    INVALID_TOKEN_MESSAGE,
    NO_TOKEN_MESSAGE,
    AuthError,
    create_access_token,
    decode_access_token,
    hash_password,
    parse_expires_in,
    verify_password,
)

SECRET = "test-secret"


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("secret123")
        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("wrong", hashed)

    def test_malformed_hash(self):
        assert not verify_password("secret123", "not-a-bcrypt-hash")


class TestExpiresIn:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("7d", timedelta(days=7)),
            ("24h", timedelta(hours=24)),
            ("30m", timedelta(minutes=30)),
            ("3600s", timedelta(seconds=3600)),
            ("90", timedelta(seconds=90)),
        ],
    )
    def test_units(self, value, expected):
        assert parse_expires_in(value) == expected

    def test_garbage(self):
        with pytest.raises(ValueError):
            parse_expires_in("soon")


class TestTokens:
    def test_round_trip(self):
        token = create_access_token("abc123", "asha@example.com", secret=SECRET)
        payload = decode_access_token(token, secret=SECRET)
        assert payload["userId"] == "abc123"
        assert payload["email"] == "asha@example.com"
        assert "exp" in payload

    def test_wrong_secret(self):
        token = create_access_token("abc123", "asha@example.com", secret=SECRET)
        with pytest.raises(AuthError, match=INVALID_TOKEN_MESSAGE):
            decode_access_token(token, secret="other")

    def test_expired(self):
        token = create_access_token("abc123", "asha@example.com", secret=SECRET, expires_in="0")
        with pytest.raises(AuthError) as excinfo:
            decode_access_token(token, secret=SECRET)
        assert str(excinfo.value) == EXPIRED_TOKEN_MESSAGE

    def test_missing_token(self):
        with pytest.raises(AuthError) as excinfo:
            decode_access_token("", secret=SECRET)
        assert str(excinfo.value) == NO_TOKEN_MESSAGE

    def test_payload_without_user(self):
        token = jwt.encode({"email": "asha@example.com"}, SECRET, algorithm="HS256")
        with pytest.raises(AuthError):
            decode_access_token(token, secret=SECRET)
