"""
Wallet auth API endpoints.

Step 1: POST /challenge - request a challenge for a wallet address
Step 2: POST /connect   - submit the signed challenge, receive a session token

Both endpoints sit behind independent per-IP rate limits (stricter on
/connect). Errors are raised as XelmaError subclasses and rendered by the
app-level exception handlers as {error, message}.
"""

from fastapi import APIRouter, Depends

from modules.auth.interfaces import IWalletAuthService
from modules.auth.models import (
    AuthResponse,
    ChallengeRequest,
    ChallengeResponse,
    ConnectRequest,
)

from ..dependencies import get_auth_service
from ..models import AUTH_ERROR_RESPONSES
from ..middleware.rate_limit import challenge_rate_limit, connect_rate_limit

router = APIRouter()


@router.post(
    "/challenge",
    response_model=ChallengeResponse,
    responses=AUTH_ERROR_RESPONSES,
    dependencies=[Depends(challenge_rate_limit)],
)
async def request_challenge(
    request: ChallengeRequest,
    service: IWalletAuthService = Depends(get_auth_service),
) -> ChallengeResponse:
    """
    Issue a one-time challenge for a Stellar wallet.

    The challenge expires after a few minutes and can be used once.
    """
    return await service.issue_challenge(request.wallet_address)


@router.post(
    "/connect",
    response_model=AuthResponse,
    responses=AUTH_ERROR_RESPONSES,
    dependencies=[Depends(connect_rate_limit)],
)
async def connect_wallet(
    request: ConnectRequest,
    service: IWalletAuthService = Depends(get_auth_service),
) -> AuthResponse:
    """
    Verify a signed challenge and authenticate the wallet.

    Creates the user on first login and returns a signed session token.
    """
    return await service.verify_and_authenticate(
        request.wallet_address,
        request.challenge,
        request.signature,
    )
