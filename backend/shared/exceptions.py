"""
Base exception classes for the Xelma backend.

Each module should define its own exceptions that inherit from these bases.
This enables consistent error handling across the application: the API layer
maps every XelmaError to its status_code and a {error, message} payload.
"""

from typing import Optional, Any


class XelmaError(Exception):
    """
    Base exception for all Xelma errors.

    All custom exceptions should inherit from this class.
    `details` is kept for server-side diagnostics and is never sent to clients.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to the public payload for API responses."""
        return {
            "error": self.code,
            "message": self.message,
        }


class ValidationError(XelmaError):
    """Input validation failed."""

    status_code = 400


class AuthenticationError(XelmaError):
    """Authentication failed (invalid or missing credentials)."""

    status_code = 401


class AuthorizationError(XelmaError):
    """Authorization failed (insufficient permissions)."""

    status_code = 403


class ConflictError(XelmaError):
    """A resource with the same unique key already exists."""

    status_code = 409


class InternalError(XelmaError):
    """Storage, entropy or configuration failure."""

    status_code = 500

    def __init__(
        self,
        message: str = "Internal server error",
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code or "INTERNAL_ERROR", details)


class RateLimitExceededError(XelmaError):
    """Client exhausted its request budget for the current window."""

    status_code = 429

    def __init__(self, message: str, retry_after: int, limit: Optional[int] = None):
        super().__init__(
            message,
            code="TOO_MANY_REQUESTS",
            details={"retry_after": retry_after, "limit": limit},
        )
        self.retry_after = retry_after
        self.limit = limit
