"""
Tests for shared models.
"""

import pytest
from datetime import datetime, timezone
from pydantic import ValidationError

from shared.models import AuthenticatedUser, CamelModel

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class TestCamelModel:

    def test_alias_generation(self):
        class Sample(CamelModel):
            wallet_address: str

        assert Sample.model_validate({"walletAddress": "GABC"}).wallet_address == "GABC"
        assert Sample(wallet_address="GABC").model_dump(by_alias=True) == {"walletAddress": "GABC"}


class TestAuthenticatedUser:
    """Tests for the AuthenticatedUser model in shared."""

    def test_create_with_required_fields(self):
        user = AuthenticatedUser(
            id="user-123",
            wallet_address="GABC",
            issued_at=NOW,
            expires_at=NOW,
        )
        assert user.id == "user-123"
        assert user.wallet_address == "GABC"

    def test_missing_fields(self):
        with pytest.raises(ValidationError):
            AuthenticatedUser(id="user-123")

    def test_is_immutable(self):
        """Should be immutable (frozen)."""
        user = AuthenticatedUser(id="u", wallet_address="GABC", issued_at=NOW, expires_at=NOW)
        with pytest.raises(ValidationError):
            user.id = "other"

    def test_serializes_camel_case(self):
        user = AuthenticatedUser(id="u", wallet_address="GABC", issued_at=NOW, expires_at=NOW)
        data = user.model_dump(by_alias=True)
        assert set(data) == {"id", "walletAddress", "issuedAt", "expiresAt"}
