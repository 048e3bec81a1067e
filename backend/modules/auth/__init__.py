"""
Wallet authentication module.

Handles wallet challenge issuance, signature verification, session tokens
and the user records created on first login.

Public API:
- IWalletAuthService: Interface for wallet auth operations
- IChallengeStore / IUserRepository: Persistence contracts
- Challenge, User, SessionClaims: Data models
- Auth exceptions: ChallengeRejectedError, InvalidTokenError, etc.
"""

from .interfaces import IChallengeStore, IUserRepository, IWalletAuthService
from .models import (
    AuthResponse,
    Challenge,
    ChallengeResponse,
    SessionClaims,
    User,
    UserResponse,
)
from .exceptions import (
    ChallengeConflictError,
    ChallengeRejectedError,
    ExpiredTokenError,
    InvalidTokenError,
    InvalidWalletAddressError,
    MalformedTokenError,
    MissingFieldsError,
    MissingTokenError,
    RejectionReason,
    StoreError,
    TokenSignatureError,
    UserAlreadyExistsError,
)

__all__ = [
    # Interfaces
    "IWalletAuthService",
    "IChallengeStore",
    "IUserRepository",
    # Models
    "AuthResponse",
    "Challenge",
    "ChallengeResponse",
    "SessionClaims",
    "User",
    "UserResponse",
    # Exceptions
    "ChallengeConflictError",
    "ChallengeRejectedError",
    "ExpiredTokenError",
    "InvalidTokenError",
    "InvalidWalletAddressError",
    "MalformedTokenError",
    "MissingFieldsError",
    "MissingTokenError",
    "RejectionReason",
    "StoreError",
    "TokenSignatureError",
    "UserAlreadyExistsError",
]
