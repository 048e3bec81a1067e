"""
Authentication module exceptions.

These exceptions are raised by the auth module and caught by the API
error handlers to return appropriate HTTP responses.

Every challenge rejection shares one public message so that clients cannot
tell an unknown challenge from an expired, reused or mis-signed one. The
precise reason is kept in `reason` / `details` for server-side logs.
"""

from enum import Enum

from shared.exceptions import (
    AuthenticationError,
    ConflictError,
    InternalError,
    ValidationError,
)


GENERIC_CHALLENGE_MESSAGE = "Invalid or expired challenge"


class RejectionReason(str, Enum):
    """Internal reason a challenge verification was refused."""

    NOT_FOUND = "not_found"
    WALLET_MISMATCH = "wallet_mismatch"
    EXPIRED = "expired"
    ALREADY_USED = "already_used"
    INVALID_SIGNATURE = "invalid_signature"


class MissingFieldsError(ValidationError):
    """Raised when required request fields are absent or empty."""

    def __init__(self, fields: list[str]):
        super().__init__(
            f"{', '.join(fields)} {'is' if len(fields) == 1 else 'are'} required",
            code="VALIDATION_ERROR",
            details={"fields": fields},
        )


class InvalidWalletAddressError(ValidationError):
    """Raised when a wallet address is not a valid Stellar account ID."""

    def __init__(self):
        super().__init__(
            "Invalid Stellar wallet address format",
            code="VALIDATION_ERROR",
        )


class ChallengeRejectedError(AuthenticationError):
    """Raised when a challenge/signature pair does not authenticate."""

    def __init__(self, reason: RejectionReason):
        super().__init__(
            GENERIC_CHALLENGE_MESSAGE,
            code="AUTHENTICATION_FAILED",
            details={"reason": reason.value},
        )
        self.reason = reason


class ChallengeConflictError(ConflictError):
    """Raised by a challenge store when a token already exists."""

    def __init__(self):
        super().__init__("Challenge token already exists", code="CHALLENGE_CONFLICT")


class UserAlreadyExistsError(ConflictError):
    """Raised by a user repository when the wallet already has a user row."""

    def __init__(self, wallet_address: str):
        super().__init__(
            "User already exists for wallet",
            code="USER_EXISTS",
            details={"wallet_address": wallet_address},
        )


class StoreError(InternalError):
    """Raised when the persistence layer fails (I/O, timeout, PostgREST error)."""

    def __init__(self, operation: str, cause: str = ""):
        super().__init__(
            details={"operation": operation, "cause": cause},
        )
        self.operation = operation


class InvalidTokenError(AuthenticationError):
    """Raised when a session token cannot be accepted."""

    def __init__(self, message: str = "Invalid authentication token", code: str = "INVALID_TOKEN"):
        super().__init__(message, code=code)


class MissingTokenError(InvalidTokenError):
    """Raised when no session token is provided."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="MISSING_TOKEN")


class MalformedTokenError(InvalidTokenError):
    """Raised when a session token cannot be parsed or lacks required claims."""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message, code="MALFORMED_TOKEN")


class TokenSignatureError(InvalidTokenError):
    """Raised when a session token's signature does not verify."""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message, code="BAD_SIGNATURE")


class ExpiredTokenError(InvalidTokenError):
    """Raised when a session token has expired."""

    def __init__(self, message: str = "Authentication token has expired"):
        super().__init__(message, code="TOKEN_EXPIRED")
