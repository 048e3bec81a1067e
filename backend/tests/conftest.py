"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules:
Stellar wallet keypairs, in-memory stores, a controllable clock and a
fully wired WalletAuthService.
"""

import asyncio
import base64
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from api.dependencies import reset_container
from modules.auth.exceptions import (
    ChallengeConflictError,
    StoreError,
    UserAlreadyExistsError,
)
from modules.auth.models import Challenge, User
from modules.auth.service import WalletAuthService
from modules.auth.session_token import SessionTokenCodec
from modules.auth.signature import encode_account_id
from shared.config import Settings


# Test session secret (only for testing)
TEST_SESSION_SECRET = "test-session-secret-for-testing-only-0123456789"

T0 = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class Wallet:
    """An Ed25519 keypair with its Stellar address."""

    def __init__(self, private_key: Optional[Ed25519PrivateKey] = None):
        self.private_key = private_key or Ed25519PrivateKey.generate()
        public_bytes = self.private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        self.address = encode_account_id(public_bytes)

    def sign(self, message: str) -> str:
        """Base64 signature over the UTF-8 bytes of `message`."""
        return base64.b64encode(self.private_key.sign(message.encode("utf-8"))).decode("ascii")

    def sign_hex(self, message: str) -> str:
        return self.private_key.sign(message.encode("utf-8")).hex()


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class InMemoryChallengeStore:
    """
    IChallengeStore backed by a dict.

    Reads yield to the event loop so that concurrent verifications interleave
    the way they would against a real database. Operation names listed in
    `failing` raise StoreError.
    """

    def __init__(self):
        self.challenges: dict[str, Challenge] = {}
        self.failing: set[str] = set()
        self.conflicts_remaining = 0
        self.mark_used_calls = 0
        self._lock = asyncio.Lock()

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.failing:
            raise StoreError(operation, "simulated failure")

    def by_token(self, token: str) -> Optional[Challenge]:
        for challenge in self.challenges.values():
            if challenge.token == token:
                return challenge
        return None

    async def purge_expired(self, wallet_address: str, now: datetime) -> int:
        self._maybe_fail("purge_expired")
        doomed = [
            c.id for c in self.challenges.values()
            if c.wallet_address == wallet_address and not c.is_used and c.expires_at < now
        ]
        for challenge_id in doomed:
            del self.challenges[challenge_id]
        return len(doomed)

    async def create(self, challenge: Challenge) -> Challenge:
        self._maybe_fail("create")
        if self.conflicts_remaining > 0:
            self.conflicts_remaining -= 1
            raise ChallengeConflictError()
        if self.by_token(challenge.token) is not None:
            raise ChallengeConflictError()
        self.challenges[challenge.id] = challenge.model_copy()
        return challenge.model_copy()

    async def find_by_token(self, token: str) -> Optional[Challenge]:
        self._maybe_fail("find_by_token")
        await asyncio.sleep(0)
        found = self.by_token(token)
        return found.model_copy() if found else None

    async def mark_used(self, challenge_id: str, used_at: datetime) -> bool:
        self._maybe_fail("mark_used")
        self.mark_used_calls += 1
        await asyncio.sleep(0)
        async with self._lock:
            challenge = self.challenges.get(challenge_id)
            if challenge is None or challenge.is_used:
                return False
            self.challenges[challenge_id] = challenge.model_copy(
                update={"is_used": True, "used_at": used_at}
            )
            return True

    async def link_user(self, challenge_id: str, user_id: str) -> None:
        self._maybe_fail("link_user")
        challenge = self.challenges.get(challenge_id)
        if challenge is not None:
            self.challenges[challenge_id] = challenge.model_copy(update={"user_id": user_id})

    async def delete_by_id(self, challenge_id: str) -> None:
        self._maybe_fail("delete_by_id")
        self.challenges.pop(challenge_id, None)

    async def purge_used_older_than(self, wallet_address: str, cutoff: datetime) -> int:
        self._maybe_fail("purge_used_older_than")
        doomed = [
            c.id for c in self.challenges.values()
            if c.wallet_address == wallet_address and c.is_used and c.used_at and c.used_at < cutoff
        ]
        for challenge_id in doomed:
            del self.challenges[challenge_id]
        return len(doomed)


class InMemoryUserRepository:
    """IUserRepository backed by a dict keyed by wallet address."""

    def __init__(self):
        self.users: dict[str, User] = {}
        self.failing: set[str] = set()
        self.create_calls = 0

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.failing:
            raise StoreError(operation, "simulated failure")

    async def get_by_wallet(self, wallet_address: str) -> Optional[User]:
        self._maybe_fail("get_by_wallet")
        await asyncio.sleep(0)
        return self.users.get(wallet_address)

    async def create(self, wallet_address: str, now: datetime) -> User:
        self._maybe_fail("create")
        self.create_calls += 1
        await asyncio.sleep(0)
        if wallet_address in self.users:
            raise UserAlreadyExistsError(wallet_address)
        user = User(
            id=str(uuid.uuid4()),
            wallet_address=wallet_address,
            created_at=now,
            last_login_at=now,
        )
        self.users[wallet_address] = user
        return user

    async def touch_last_login(self, wallet_address: str, now: datetime) -> Optional[User]:
        self._maybe_fail("touch_last_login")
        user = self.users.get(wallet_address)
        if user is None:
            return None
        if user.last_login_at < now:
            user = user.model_copy(update={"last_login_at": now})
            self.users[wallet_address] = user
        return user


def create_test_token(
    user_id: str = "test-user-123",
    wallet_address: Optional[str] = None,
    issued_at: Optional[datetime] = None,
    lifetime_seconds: int = 3600,
    secret: str = TEST_SESSION_SECRET,
) -> str:
    """
    Create a session token for authentication tests.

    Args:
        user_id: User ID to include in the token
        wallet_address: Wallet to include (a fresh one if omitted)
        issued_at: Issuance time (defaults to now)
        lifetime_seconds: Token lifetime; negative values give an expired token
        secret: Signing secret
    """
    codec = SessionTokenCodec(secret=secret, lifetime_seconds=lifetime_seconds)
    return codec.issue(
        user_id,
        wallet_address or Wallet().address,
        issued_at or datetime.now(timezone.utc),
    )


@pytest.fixture(autouse=True)
def reset_service_container():
    """Reset the service container before and after each test."""
    reset_container()
    yield
    reset_container()


@pytest.fixture
def wallet() -> Wallet:
    return Wallet()


@pytest.fixture
def other_wallet() -> Wallet:
    return Wallet()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_settings() -> Settings:
    """Settings with a session secret and default auth windows."""
    return Settings(
        session_jwt_secret=TEST_SESSION_SECRET,
        supabase_url="",
        supabase_service_role_key="",
    )


@pytest.fixture
def challenge_store() -> InMemoryChallengeStore:
    return InMemoryChallengeStore()


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def token_codec(test_settings: Settings) -> SessionTokenCodec:
    return SessionTokenCodec(
        secret=test_settings.session_jwt_secret,
        algorithm=test_settings.session_jwt_algorithm,
        lifetime_seconds=test_settings.session_token_lifetime_seconds,
    )


@pytest.fixture
def auth_service(
    challenge_store: InMemoryChallengeStore,
    user_repository: InMemoryUserRepository,
    token_codec: SessionTokenCodec,
    test_settings: Settings,
    clock: FakeClock,
) -> WalletAuthService:
    """WalletAuthService wired to in-memory stores and a fake clock."""
    return WalletAuthService(
        challenge_store=challenge_store,
        user_repository=user_repository,
        token_codec=token_codec,
        settings=test_settings,
        clock=clock,
    )
