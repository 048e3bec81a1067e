"""
Wallet challenge generation.

A challenge is the string a wallet signs to prove it holds the private key.
Format: "<prefix>_<epoch millis>_<64 hex chars>". The prefix namespaces the
token, the 32 random bytes provide 256 bits of entropy.
"""

import re
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional


CHALLENGE_PREFIX = "xelma_auth"
CHALLENGE_NUM_BYTES = 32  # 32 bytes = 64 hex characters
CHALLENGE_EXPIRY_SECONDS = 5 * 60


def generate_challenge_token(
    prefix: str = CHALLENGE_PREFIX,
    now: Optional[datetime] = None,
) -> str:
    """
    Generate a cryptographically secure challenge string.

    Args:
        prefix: Namespace for the token (default: "xelma_auth")
        now: Issue time embedded in the token (default: current UTC time)

    Returns:
        Challenge string, e.g. "xelma_auth_1717171717171_a1b2c3..."
    """
    issued_at = _ensure_aware(now) if now is not None else datetime.now(timezone.utc)
    timestamp = int(issued_at.timestamp() * 1000)
    random_part = secrets.token_hex(CHALLENGE_NUM_BYTES)
    return f"{prefix}_{timestamp}_{random_part}"


def is_well_formed_challenge(token: object, prefix: str = CHALLENGE_PREFIX) -> bool:
    """Check that a client-supplied string has the shape of an issued challenge."""
    if not isinstance(token, str):
        return False
    pattern = rf"{re.escape(prefix)}_[0-9]+_[0-9a-f]{{{CHALLENGE_NUM_BYTES * 2}}}"
    return re.fullmatch(pattern, token) is not None


def _ensure_aware(dt: datetime) -> datetime:
    """Treat naive datetimes read from storage as UTC."""
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def challenge_expiry(now: datetime, window_seconds: int = CHALLENGE_EXPIRY_SECONDS) -> datetime:
    """Return the expiry time for a challenge issued at `now`."""
    return _ensure_aware(now) + timedelta(seconds=window_seconds)


def is_challenge_expired(expires_at: datetime, now: datetime) -> bool:
    """A challenge is expired once `now` is strictly past `expires_at`."""
    return _ensure_aware(now) > _ensure_aware(expires_at)
