"""
Authentication module data models.

These models define the records kept by the challenge store and user
repository, the claims carried in session tokens, and the request/response
bodies of the wallet auth endpoints.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field

from shared.models import CamelModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Challenge(BaseModel):
    """
    A single issued authentication attempt.

    `is_used` only ever moves from False to True, and only through the
    store's conditional mark_used operation.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Challenge ID")
    token: str = Field(..., description="Opaque challenge string the wallet signs")
    wallet_address: str = Field(..., description="Wallet the challenge was issued for")
    expires_at: datetime = Field(..., description="Absolute expiry time (UTC)")
    is_used: bool = Field(default=False, description="Whether the challenge was consumed")
    used_at: Optional[datetime] = Field(None, description="When the challenge was consumed")
    user_id: Optional[str] = Field(None, description="User resolved during verification")
    created_at: datetime = Field(default_factory=_utcnow, description="Issuance time")


class User(BaseModel):
    """An authenticated wallet identity."""

    id: str = Field(..., description="User ID (UUID)")
    wallet_address: str = Field(..., description="Unique wallet address")
    created_at: datetime = Field(..., description="First authentication time")
    last_login_at: datetime = Field(..., description="Most recent authentication time")


class SessionClaims(BaseModel):
    """Claims embedded in a session token."""

    user_id: str
    wallet_address: str
    issued_at: datetime
    expires_at: datetime

    model_config = {"frozen": True}


# -------------------------------------------------------------------------
# API request / response bodies
# -------------------------------------------------------------------------


class ChallengeRequest(CamelModel):
    """Body of POST /auth/challenge.

    Fields are optional at the schema level so that absence is reported
    by the service as a domain validation error rather than a 422.
    """

    wallet_address: Optional[str] = None


class ChallengeResponse(CamelModel):
    challenge: str
    expires_at: datetime


class ConnectRequest(CamelModel):
    """Body of POST /auth/connect."""

    wallet_address: Optional[str] = None
    challenge: Optional[str] = None
    signature: Optional[str] = None


class UserResponse(CamelModel):
    id: str
    wallet_address: str
    created_at: datetime
    last_login_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            wallet_address=user.wallet_address,
            created_at=user.created_at,
            last_login_at=user.last_login_at,
        )


class AuthResponse(CamelModel):
    token: str
    user: UserResponse
