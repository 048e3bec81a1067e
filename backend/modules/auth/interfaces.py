"""
Authentication module interfaces.

Other modules should depend on IWalletAuthService, not the concrete
implementation. The store protocols describe what the service needs from
persistence; the Supabase repositories implement them and tests swap in
in-memory fakes.
"""

from datetime import datetime
from typing import Protocol, Optional, runtime_checkable

from shared.models import AuthenticatedUser

from .models import AuthResponse, Challenge, ChallengeResponse, User


@runtime_checkable
class IChallengeStore(Protocol):
    """
    Durable record of outstanding and consumed challenges.

    Only the authentication service mutates challenges. Any method may raise
    StoreError on an I/O failure.
    """

    async def purge_expired(self, wallet_address: str, now: datetime) -> int:
        """Delete this wallet's unused challenges with expires_at < now."""
        ...

    async def create(self, challenge: Challenge) -> Challenge:
        """
        Persist a new challenge.

        Raises:
            ChallengeConflictError: If the token already exists
        """
        ...

    async def find_by_token(self, token: str) -> Optional[Challenge]:
        """Look up a challenge by its token string."""
        ...

    async def mark_used(self, challenge_id: str, used_at: datetime) -> bool:
        """
        Atomically consume a challenge.

        Must be a single conditional update (is_used = false -> true).

        Returns:
            True if this call flipped the flag, False if it was already used
            or no longer exists
        """
        ...

    async def link_user(self, challenge_id: str, user_id: str) -> None:
        """Record the user a challenge authenticated."""
        ...

    async def delete_by_id(self, challenge_id: str) -> None:
        """Remove a challenge."""
        ...

    async def purge_used_older_than(self, wallet_address: str, cutoff: datetime) -> int:
        """Delete this wallet's used challenges with used_at < cutoff."""
        ...


@runtime_checkable
class IUserRepository(Protocol):
    """User records keyed by wallet address."""

    async def get_by_wallet(self, wallet_address: str) -> Optional[User]:
        ...

    async def create(self, wallet_address: str, now: datetime) -> User:
        """
        Create a user with created_at = last_login_at = now.

        Raises:
            UserAlreadyExistsError: If the wallet already has a user
        """
        ...

    async def touch_last_login(self, wallet_address: str, now: datetime) -> Optional[User]:
        """
        Advance last_login_at to `now` (never backwards).

        Returns:
            The current user row, or None if no user exists for the wallet
        """
        ...


@runtime_checkable
class IWalletAuthService(Protocol):
    """
    Interface for wallet authentication operations.

    This protocol defines the contract that the auth module exposes
    to the API layer and other modules.
    """

    async def issue_challenge(self, wallet_address: Optional[str]) -> ChallengeResponse:
        """
        Issue a one-time challenge for a wallet.

        Raises:
            ValidationError: If the address is missing or malformed
            InternalError: If the challenge cannot be stored
        """
        ...

    async def verify_and_authenticate(
        self,
        wallet_address: Optional[str],
        challenge: Optional[str],
        signature: Optional[str],
    ) -> AuthResponse:
        """
        Verify a signed challenge and issue a session token.

        Raises:
            ValidationError: If inputs are missing or malformed
            AuthenticationError: If the challenge or signature is rejected
            InternalError: If persistence fails
        """
        ...

    async def validate_session(self, token: Optional[str]) -> AuthenticatedUser:
        """
        Validate a session token and return the authenticated user.

        Raises:
            InvalidTokenError: If the token is missing, malformed, tampered or expired
        """
        ...
