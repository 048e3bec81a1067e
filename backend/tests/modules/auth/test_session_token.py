"""Tests for the session token codec."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from modules.auth.exceptions import (
    ExpiredTokenError,
    InvalidTokenError,
    MalformedTokenError,
    MissingTokenError,
    TokenSignatureError,
)
from modules.auth.session_token import SessionTokenCodec
from shared.exceptions import InternalError

from conftest import TEST_SESSION_SECRET, Wallet

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def codec() -> SessionTokenCodec:
    return SessionTokenCodec(secret=TEST_SESSION_SECRET, lifetime_seconds=3600)


class TestIssue:

    def test_claims(self, codec: SessionTokenCodec, wallet: Wallet):
        token = codec.issue("user-1", wallet.address, NOW)
        payload = jwt.decode(
            token, TEST_SESSION_SECRET, algorithms=["HS256"], options={"verify_exp": False}
        )
        assert payload["sub"] == "user-1"
        assert payload["wallet_address"] == wallet.address
        assert payload["iat"] == int(NOW.timestamp())
        assert payload["exp"] == int(NOW.timestamp()) + 3600

    def test_default_lifetime_is_24_hours(self):
        codec = SessionTokenCodec(secret=TEST_SESSION_SECRET)
        assert codec.lifetime == timedelta(hours=24)

    def test_empty_user_id_rejected(self, codec: SessionTokenCodec, wallet: Wallet):
        with pytest.raises(ValueError):
            codec.issue("", wallet.address, NOW)

    def test_empty_wallet_rejected(self, codec: SessionTokenCodec):
        with pytest.raises(ValueError):
            codec.issue("user-1", "", NOW)

    def test_missing_secret_is_internal_error(self, wallet: Wallet):
        codec = SessionTokenCodec(secret="")
        with pytest.raises(InternalError) as exc_info:
            codec.issue("user-1", wallet.address, NOW)
        assert exc_info.value.status_code == 500
        assert "secret" not in exc_info.value.message.lower()


class TestValidate:

    def test_roundtrip(self, codec: SessionTokenCodec, wallet: Wallet):
        token = codec.issue("user-1", wallet.address, NOW)
        claims = codec.validate(token, NOW + timedelta(minutes=30))
        assert claims.user_id == "user-1"
        assert claims.wallet_address == wallet.address
        assert claims.issued_at == NOW
        assert claims.expires_at == NOW + timedelta(hours=1)

    def test_expires_exactly_at_exp(self, codec: SessionTokenCodec, wallet: Wallet):
        token = codec.issue("user-1", wallet.address, NOW)
        codec.validate(token, NOW + timedelta(seconds=3599))
        with pytest.raises(ExpiredTokenError):
            codec.validate(token, NOW + timedelta(seconds=3600))

    def test_expired_token(self, codec: SessionTokenCodec, wallet: Wallet):
        token = codec.issue("user-1", wallet.address, NOW)
        with pytest.raises(ExpiredTokenError) as exc_info:
            codec.validate(token, NOW + timedelta(days=2))
        assert exc_info.value.code == "TOKEN_EXPIRED"

    @pytest.mark.parametrize("token", ["", None])
    def test_missing_token(self, codec: SessionTokenCodec, token):
        with pytest.raises(MissingTokenError):
            codec.validate(token, NOW)

    def test_garbage_token(self, codec: SessionTokenCodec):
        with pytest.raises(MalformedTokenError):
            codec.validate("not-a-jwt", NOW)

    def test_wrong_secret(self, codec: SessionTokenCodec, wallet: Wallet):
        other = SessionTokenCodec(secret="a-different-secret-that-is-long-enough-too")
        token = other.issue("user-1", wallet.address, NOW)
        with pytest.raises(TokenSignatureError) as exc_info:
            codec.validate(token, NOW)
        assert exc_info.value.code == "BAD_SIGNATURE"

    def test_tampered_payload(self, codec: SessionTokenCodec, wallet: Wallet, other_wallet: Wallet):
        """Swapping the payload under an existing signature must fail."""
        token = codec.issue("user-1", wallet.address, NOW)
        header, _, signature = token.split(".")
        forged_body = jwt.encode(
            {
                "sub": "user-2",
                "wallet_address": other_wallet.address,
                "iat": int(NOW.timestamp()),
                "exp": int(NOW.timestamp()) + 3600,
            },
            "irrelevant-secret-for-forging-the-body",
            algorithm="HS256",
        ).split(".")[1]
        with pytest.raises(TokenSignatureError):
            codec.validate(f"{header}.{forged_body}.{signature}", NOW)

    def test_missing_required_claim(self, codec: SessionTokenCodec):
        token = jwt.encode(
            {"sub": "user-1", "iat": int(NOW.timestamp()), "exp": int(NOW.timestamp()) + 60},
            TEST_SESSION_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(MalformedTokenError):
            codec.validate(token, NOW)

    def test_wrong_claim_type(self, codec: SessionTokenCodec):
        token = jwt.encode(
            {
                "sub": "user-1",
                "wallet_address": 42,
                "iat": int(NOW.timestamp()),
                "exp": int(NOW.timestamp()) + 60,
            },
            TEST_SESSION_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(MalformedTokenError):
            codec.validate(token, NOW)

    def test_unsigned_token_rejected(self, codec: SessionTokenCodec, wallet: Wallet):
        token = jwt.encode(
            {
                "sub": "user-1",
                "wallet_address": wallet.address,
                "iat": int(NOW.timestamp()),
                "exp": int(NOW.timestamp()) + 60,
            },
            None,
            algorithm="none",
        )
        with pytest.raises(InvalidTokenError):
            codec.validate(token, NOW)

    def test_all_failures_are_401(self, codec: SessionTokenCodec):
        with pytest.raises(InvalidTokenError) as exc_info:
            codec.validate("a.b.c", NOW)
        assert exc_info.value.status_code == 401
