"""
Session token codec.

After a wallet proves key possession, the service issues a signed JWT that
the client presents as `Authorization: Bearer <token>` on later requests.

The token carries:
- sub: The user ID
- wallet_address: The authenticated Stellar address
- iat: Issued at timestamp
- exp: Expiration timestamp

Validation needs nothing but the signing secret and the current time;
there is no server-side session record, so tokens cannot be revoked early.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from shared.exceptions import InternalError

from .models import SessionClaims
from .exceptions import (
    ExpiredTokenError,
    MalformedTokenError,
    MissingTokenError,
    TokenSignatureError,
)


REQUIRED_CLAIMS = ["sub", "wallet_address", "iat", "exp"]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class SessionTokenCodec:
    """Issues and validates HMAC-signed session tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime_seconds: int = 24 * 60 * 60,
    ):
        self._secret = secret
        self._algorithm = algorithm
        self._lifetime = timedelta(seconds=lifetime_seconds)

    @property
    def lifetime(self) -> timedelta:
        return self._lifetime

    def _require_secret(self) -> None:
        if not self._secret:
            raise InternalError(details={"reason": "session secret not configured"})

    def issue(
        self,
        user_id: str,
        wallet_address: str,
        now: Optional[datetime] = None,
    ) -> str:
        """
        Create a session token for an authenticated wallet.

        Args:
            user_id: ID of the resolved user record
            wallet_address: The wallet that signed the challenge
            now: Issuance time (defaults to current UTC time)

        Returns:
            A JWT string for the Authorization: Bearer header

        Raises:
            ValueError: If user_id or wallet_address is empty
            InternalError: If the signing secret is not configured
        """
        self._require_secret()
        if not user_id or not wallet_address:
            raise ValueError("user_id and wallet_address are required")

        now = now or datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "sub": user_id,
            "wallet_address": wallet_address,
            "iat": int(now.timestamp()),
            "exp": int((now + self._lifetime).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def validate(self, token: Optional[str], now: Optional[datetime] = None) -> SessionClaims:
        """
        Validate a session token and return its claims.

        Expiry is checked against `now` rather than the library clock so that
        callers control time.

        Raises:
            MissingTokenError: Token is empty
            MalformedTokenError: Token cannot be parsed or lacks required claims
            TokenSignatureError: Signature does not match
            ExpiredTokenError: exp <= now
        """
        self._require_secret()
        if not token:
            raise MissingTokenError()

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": REQUIRED_CLAIMS,
                },
            )
        except jwt.InvalidSignatureError:
            raise TokenSignatureError()
        except jwt.InvalidTokenError:
            raise MalformedTokenError()

        user_id = payload["sub"]
        wallet_address = payload["wallet_address"]
        issued_at = payload["iat"]
        expires_at = payload["exp"]
        if not (
            isinstance(user_id, str)
            and isinstance(wallet_address, str)
            and _is_int(issued_at)
            and _is_int(expires_at)
        ):
            raise MalformedTokenError()

        now = now or datetime.now(timezone.utc)
        if expires_at <= now.timestamp():
            raise ExpiredTokenError()

        return SessionClaims(
            user_id=user_id,
            wallet_address=wallet_address,
            issued_at=datetime.fromtimestamp(issued_at, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc),
        )
