"""
Wallet authentication service implementation.

Ties challenge generation, signature verification and session tokens into
the challenge-response flow:

    issue_challenge -> (wallet signs) -> verify_and_authenticate -> session token

A challenge moves Issued -> Consumed or Issued -> Expired; both end states
are final and the client must request a fresh challenge afterwards.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from shared.config import Settings, get_settings
from shared.exceptions import InternalError
from shared.models import AuthenticatedUser

from .challenge import (
    challenge_expiry,
    generate_challenge_token,
    is_challenge_expired,
    is_well_formed_challenge,
)
from .exceptions import (
    ChallengeConflictError,
    ChallengeRejectedError,
    InvalidWalletAddressError,
    MissingFieldsError,
    RejectionReason,
    StoreError,
    UserAlreadyExistsError,
)
from .interfaces import IChallengeStore, IUserRepository, IWalletAuthService
from .models import (
    AuthResponse,
    Challenge,
    ChallengeResponse,
    User,
    UserResponse,
)
from .session_token import SessionTokenCodec
from .signature import is_valid_address, verify_signature

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _missing(**fields: Optional[str]) -> list[str]:
    """Names of fields that are absent (None) or empty strings."""
    return [
        name for name, value in fields.items()
        if value is None or (isinstance(value, str) and value == "")
    ]


class WalletAuthService(IWalletAuthService):
    """
    Implementation of the wallet authentication service.

    Persistence is reached only through IChallengeStore and IUserRepository.
    """

    def __init__(
        self,
        challenge_store: IChallengeStore,
        user_repository: IUserRepository,
        token_codec: SessionTokenCodec,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._challenges = challenge_store
        self._users = user_repository
        self._tokens = token_codec
        self._settings = settings or get_settings()
        self._clock = clock

    # -------------------------------------------------------------------------
    # Challenge issuance
    # -------------------------------------------------------------------------

    async def issue_challenge(self, wallet_address: Optional[str]) -> ChallengeResponse:
        """Issue a one-time challenge for a wallet address."""
        missing = _missing(walletAddress=wallet_address)
        if missing:
            raise MissingFieldsError(missing)
        if not is_valid_address(wallet_address):
            raise InvalidWalletAddressError()

        now = self._clock()
        await self._purge_expired(wallet_address, now)

        challenge = await self._create_challenge(wallet_address, now)
        logger.info("Issued challenge for wallet %s", wallet_address)
        return ChallengeResponse(challenge=challenge.token, expires_at=challenge.expires_at)

    async def _create_challenge(self, wallet_address: str, now: datetime) -> Challenge:
        """Store a fresh challenge, regenerating once on a token collision."""
        for attempt in range(2):
            challenge = Challenge(
                token=generate_challenge_token(self._settings.challenge_prefix, now),
                wallet_address=wallet_address,
                expires_at=challenge_expiry(now, self._settings.challenge_expiry_seconds),
                created_at=now,
            )
            try:
                return await self._challenges.create(challenge)
            except ChallengeConflictError:
                logger.warning("Challenge token collision (attempt %d)", attempt + 1)
            except StoreError as e:
                logger.error("Failed to store challenge: %s", e.details)
                raise InternalError("Failed to generate authentication challenge")
        raise InternalError("Failed to generate authentication challenge")

    # -------------------------------------------------------------------------
    # Verification
    # -------------------------------------------------------------------------

    async def verify_and_authenticate(
        self,
        wallet_address: Optional[str],
        challenge: Optional[str],
        signature: Optional[str],
    ) -> AuthResponse:
        """Verify a signed challenge and issue a session token."""
        missing = _missing(walletAddress=wallet_address, challenge=challenge, signature=signature)
        if missing:
            raise MissingFieldsError(missing)
        if not is_valid_address(wallet_address):
            raise InvalidWalletAddressError()

        # Anything that was never issued stays out of the store query.
        if not is_well_formed_challenge(challenge, self._settings.challenge_prefix):
            raise self._rejection(RejectionReason.NOT_FOUND, wallet_address)

        record = await self._lookup(challenge)
        if record is None:
            raise self._rejection(RejectionReason.NOT_FOUND, wallet_address)

        if record.wallet_address != wallet_address:
            raise self._rejection(RejectionReason.WALLET_MISMATCH, wallet_address)

        now = self._clock()
        if is_challenge_expired(record.expires_at, now):
            await self._best_effort("delete expired challenge", self._challenges.delete_by_id(record.id))
            raise self._rejection(RejectionReason.EXPIRED, wallet_address)

        if record.is_used:
            raise self._rejection(RejectionReason.ALREADY_USED, wallet_address)

        if not verify_signature(wallet_address, challenge, signature):
            raise self._rejection(RejectionReason.INVALID_SIGNATURE, wallet_address)

        # Exclusive gate: only the request that flips is_used may continue.
        try:
            consumed = await self._challenges.mark_used(record.id, now)
        except StoreError as e:
            logger.error("Failed to mark challenge used: %s", e.details)
            raise InternalError("Failed to authenticate wallet")
        if not consumed:
            raise self._rejection(RejectionReason.ALREADY_USED, wallet_address)

        # From here on the challenge is spent; failures require a new challenge.
        try:
            user = await self._upsert_user(wallet_address, now)
        except (StoreError, UserAlreadyExistsError) as e:
            logger.error("Failed to upsert user after consuming challenge: %s", e.details)
            raise InternalError("Failed to authenticate wallet")

        await self._best_effort("link challenge to user", self._challenges.link_user(record.id, user.id))

        token = self._tokens.issue(user.id, user.wallet_address, now)

        cutoff = now - timedelta(seconds=self._settings.challenge_retention_seconds)
        await self._best_effort(
            "purge used challenges",
            self._challenges.purge_used_older_than(wallet_address, cutoff),
        )

        logger.info("Authenticated wallet %s as user %s", wallet_address, user.id)
        return AuthResponse(token=token, user=UserResponse.from_user(user))

    async def _lookup(self, token: str) -> Optional[Challenge]:
        try:
            return await self._challenges.find_by_token(token)
        except StoreError as e:
            logger.error("Failed to look up challenge: %s", e.details)
            raise InternalError("Failed to authenticate wallet")

    async def _upsert_user(self, wallet_address: str, now: datetime) -> User:
        """
        Create the wallet's user or advance its last login.

        Concurrent first logins race on create; the loser reads the winner's row.
        """
        user = await self._users.get_by_wallet(wallet_address)
        if user is None:
            try:
                return await self._users.create(wallet_address, now)
            except UserAlreadyExistsError:
                logger.debug("User for %s created concurrently, updating instead", wallet_address)

        user = await self._users.touch_last_login(wallet_address, now)
        if user is None:
            raise StoreError("touch_last_login", "user row missing after create conflict")
        return user

    def _rejection(self, reason: RejectionReason, wallet_address: str) -> ChallengeRejectedError:
        logger.warning("Rejected challenge for wallet %s: %s", wallet_address, reason.value)
        return ChallengeRejectedError(reason)

    async def _best_effort(self, operation: str, awaitable) -> None:
        """Run housekeeping whose failure must not affect the caller's result."""
        try:
            await awaitable
        except StoreError as e:
            logger.warning("Housekeeping failed (%s): %s", operation, e.details)

    async def _purge_expired(self, wallet_address: str, now: datetime) -> None:
        await self._best_effort(
            "purge expired challenges",
            self._challenges.purge_expired(wallet_address, now),
        )

    # -------------------------------------------------------------------------
    # Session validation
    # -------------------------------------------------------------------------

    async def validate_session(self, token: Optional[str]) -> AuthenticatedUser:
        """Validate a session token and return the authenticated user."""
        claims = self._tokens.validate(token, self._clock())
        return AuthenticatedUser(
            id=claims.user_id,
            wallet_address=claims.wallet_address,
            issued_at=claims.issued_at,
            expires_at=claims.expires_at,
        )
