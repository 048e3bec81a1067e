"""
Wallet auth repositories for database access.

Encapsulates all Supabase queries and data mapping for the auth tables:
- auth_challenges
- users

Atomicity lives in the queries themselves: consuming a challenge and
advancing last_login_at are single conditional UPDATEs, and user creation
relies on the unique index on wallet_address.
"""

from datetime import datetime
from typing import Any, Optional

import httpx
from postgrest.exceptions import APIError

from shared.repository import BaseRepository, UNIQUE_VIOLATION
from .exceptions import ChallengeConflictError, StoreError, UserAlreadyExistsError
from .models import Challenge, User


CHALLENGES_TABLE = "auth_challenges"
USERS_TABLE = "users"


def _execute(operation: str, query: Any, conflict: Optional[Exception] = None) -> Any:
    """
    Run a PostgREST query, translating failures into auth exceptions.

    Args:
        operation: Name used in diagnostics
        query: A built query with an execute() method
        conflict: Exception to raise on a unique violation

    Raises:
        The `conflict` exception on a unique violation, StoreError otherwise
    """
    try:
        return query.execute()
    except APIError as e:
        if conflict is not None and e.code == UNIQUE_VIOLATION:
            raise conflict from e
        raise StoreError(operation, str(e.code)) from e
    except (httpx.HTTPError, UnicodeError) as e:
        raise StoreError(operation, e.__class__.__name__) from e


class SupabaseChallengeStore(BaseRepository[Challenge]):
    """
    Challenge store backed by the auth_challenges table.

    The token is stored in the `challenge` column, which carries a unique index.
    """

    async def purge_expired(self, wallet_address: str, now: datetime) -> int:
        """Delete this wallet's unused challenges that expired before `now`."""
        result = _execute(
            "purge_expired",
            self._db.table(CHALLENGES_TABLE)
            .delete()
            .eq("wallet_address", wallet_address)
            .eq("is_used", False)
            .lt("expires_at", now.isoformat()),
        )
        return len(result.data or [])

    async def create(self, challenge: Challenge) -> Challenge:
        """Insert a new challenge; raises ChallengeConflictError on duplicate token."""
        data = {
            "id": challenge.id,
            "challenge": challenge.token,
            "wallet_address": challenge.wallet_address,
            "expires_at": challenge.expires_at.isoformat(),
            "is_used": False,
            "created_at": challenge.created_at.isoformat(),
        }
        result = _execute(
            "create_challenge",
            self._db.table(CHALLENGES_TABLE).insert(data),
            conflict=ChallengeConflictError(),
        )
        return self._map_to_challenge(result.data[0])

    async def find_by_token(self, token: str) -> Optional[Challenge]:
        result = _execute(
            "find_by_token",
            self._db.table(CHALLENGES_TABLE).select("*").eq("challenge", token),
        )
        if not result.data:
            return None
        return self._map_to_challenge(result.data[0])

    async def mark_used(self, challenge_id: str, used_at: datetime) -> bool:
        """
        Consume a challenge with a single conditional UPDATE.

        PostgREST returns only the rows it changed, so an empty result means
        another request consumed (or deleted) the challenge first.
        """
        result = _execute(
            "mark_used",
            self._db.table(CHALLENGES_TABLE)
            .update({"is_used": True, "used_at": used_at.isoformat()})
            .eq("id", challenge_id)
            .eq("is_used", False),
        )
        return bool(result.data)

    async def link_user(self, challenge_id: str, user_id: str) -> None:
        _execute(
            "link_user",
            self._db.table(CHALLENGES_TABLE).update({"user_id": user_id}).eq("id", challenge_id),
        )

    async def delete_by_id(self, challenge_id: str) -> None:
        _execute(
            "delete_challenge",
            self._db.table(CHALLENGES_TABLE).delete().eq("id", challenge_id),
        )

    async def purge_used_older_than(self, wallet_address: str, cutoff: datetime) -> int:
        """Delete this wallet's consumed challenges used before `cutoff`."""
        result = _execute(
            "purge_used",
            self._db.table(CHALLENGES_TABLE)
            .delete()
            .eq("wallet_address", wallet_address)
            .eq("is_used", True)
            .lt("used_at", cutoff.isoformat()),
        )
        return len(result.data or [])

    def _map_to_challenge(self, data: dict[str, Any]) -> Challenge:
        """Map database row to Challenge model."""
        return Challenge(
            id=str(data["id"]),
            token=data["challenge"],
            wallet_address=data["wallet_address"],
            expires_at=data["expires_at"],
            is_used=bool(data.get("is_used", False)),
            used_at=data.get("used_at"),
            user_id=str(data["user_id"]) if data.get("user_id") is not None else None,
            created_at=data["created_at"],
        )


class SupabaseUserRepository(BaseRepository[User]):
    """User repository backed by the users table (unique wallet_address)."""

    async def get_by_wallet(self, wallet_address: str) -> Optional[User]:
        result = _execute(
            "get_user",
            self._db.table(USERS_TABLE).select("*").eq("wallet_address", wallet_address),
        )
        if not result.data:
            return None
        return self._map_to_user(result.data[0])

    async def create(self, wallet_address: str, now: datetime) -> User:
        """Insert a user; raises UserAlreadyExistsError if the wallet exists."""
        data = {
            "wallet_address": wallet_address,
            "created_at": now.isoformat(),
            "last_login_at": now.isoformat(),
        }
        result = _execute(
            "create_user",
            self._db.table(USERS_TABLE).insert(data),
            conflict=UserAlreadyExistsError(wallet_address),
        )
        return self._map_to_user(result.data[0])

    async def touch_last_login(self, wallet_address: str, now: datetime) -> Optional[User]:
        """
        Advance last_login_at to `now`.

        The `lt` filter keeps the column monotonic; when it matches nothing the
        current row (or None) is returned unchanged.
        """
        result = _execute(
            "touch_last_login",
            self._db.table(USERS_TABLE)
            .update({"last_login_at": now.isoformat()})
            .eq("wallet_address", wallet_address)
            .lt("last_login_at", now.isoformat()),
        )
        if result.data:
            return self._map_to_user(result.data[0])
        return await self.get_by_wallet(wallet_address)

    def _map_to_user(self, data: dict[str, Any]) -> User:
        """Map database row to User model."""
        return User(
            id=str(data["id"]),
            wallet_address=data["wallet_address"],
            created_at=data["created_at"],
            last_login_at=data["last_login_at"],
        )
