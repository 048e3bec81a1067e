"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.

Tests replace the wiring with app.dependency_overrides or by resetting
the container.
"""

from typing import TYPE_CHECKING

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.auth.interfaces import IChallengeStore, IUserRepository, IWalletAuthService
    from modules.auth.session_token import SessionTokenCodec
    from .middleware.rate_limit import FixedWindowRateLimiter


class ServiceContainer:
    """
    Container for all service instances.

    This class manages the lifecycle of service instances and their
    dependencies. Services are created lazily on first access.

    All services are cached as singletons within the container.
    Use reset() to clear all cached services for testing.
    """

    def __init__(self) -> None:
        self._challenge_store: "IChallengeStore | None" = None
        self._user_repository: "IUserRepository | None" = None
        self._token_codec: "SessionTokenCodec | None" = None
        self._auth_service: "IWalletAuthService | None" = None
        self._challenge_limiter: "FixedWindowRateLimiter | None" = None
        self._connect_limiter: "FixedWindowRateLimiter | None" = None

    @property
    def challenge_store(self) -> "IChallengeStore":
        """Get the challenge store instance."""
        if self._challenge_store is None:
            from modules.auth.repository import SupabaseChallengeStore
            from shared.database import get_supabase_client
            self._challenge_store = SupabaseChallengeStore(get_supabase_client())
        return self._challenge_store

    @property
    def user_repository(self) -> "IUserRepository":
        """Get the user repository instance."""
        if self._user_repository is None:
            from modules.auth.repository import SupabaseUserRepository
            from shared.database import get_supabase_client
            self._user_repository = SupabaseUserRepository(get_supabase_client())
        return self._user_repository

    @property
    def token_codec(self) -> "SessionTokenCodec":
        """Get the session token codec."""
        if self._token_codec is None:
            from modules.auth.session_token import SessionTokenCodec
            from shared.config import get_settings
            settings = get_settings()
            self._token_codec = SessionTokenCodec(
                secret=settings.session_jwt_secret,
                algorithm=settings.session_jwt_algorithm,
                lifetime_seconds=settings.session_token_lifetime_seconds,
            )
        return self._token_codec

    @property
    def auth(self) -> "IWalletAuthService":
        """Get the wallet auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import WalletAuthService
            self._auth_service = WalletAuthService(
                challenge_store=self.challenge_store,
                user_repository=self.user_repository,
                token_codec=self.token_codec,
            )
        return self._auth_service

    @property
    def challenge_limiter(self) -> "FixedWindowRateLimiter":
        """Get the rate limiter for challenge issuance."""
        if self._challenge_limiter is None:
            from shared.config import get_settings
            from .middleware.rate_limit import FixedWindowRateLimiter
            settings = get_settings()
            self._challenge_limiter = FixedWindowRateLimiter(
                max_requests=settings.rate_limit_challenge_requests,
                window_seconds=settings.rate_limit_window,
            )
        return self._challenge_limiter

    @property
    def connect_limiter(self) -> "FixedWindowRateLimiter":
        """Get the (stricter) rate limiter for challenge verification."""
        if self._connect_limiter is None:
            from shared.config import get_settings
            from .middleware.rate_limit import FixedWindowRateLimiter
            settings = get_settings()
            self._connect_limiter = FixedWindowRateLimiter(
                max_requests=settings.rate_limit_connect_requests,
                window_seconds=settings.rate_limit_window,
            )
        return self._connect_limiter

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._challenge_store = None
        self._user_repository = None
        self._token_codec = None
        self._auth_service = None
        self._challenge_limiter = None
        self._connect_limiter = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_auth_service() -> "IWalletAuthService":
    """FastAPI dependency for the wallet auth service."""
    return get_container().auth


def get_challenge_limiter() -> "FixedWindowRateLimiter":
    """FastAPI dependency for the challenge endpoint rate limiter."""
    return get_container().challenge_limiter


def get_connect_limiter() -> "FixedWindowRateLimiter":
    """FastAPI dependency for the connect endpoint rate limiter."""
    return get_container().connect_limiter
