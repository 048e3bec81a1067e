"""
User-related endpoints.

Provides the session introspection endpoint for authenticated wallets.
"""

from fastapi import APIRouter, Depends

from shared.models import AuthenticatedUser
from ..middleware.auth import get_current_user

router = APIRouter()


@router.get("/me", response_model=AuthenticatedUser)
async def get_current_session(
    user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """
    Get the identity bound to the presented session token.

    Requires authentication.
    """
    return user
