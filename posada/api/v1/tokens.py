"""Token renewal endpoint: trade a refresh token for a fresh access token."""

from typing import Annotated

from fastapi import APIRouter, Depends

from posada.api.v1.auth import get_clock, get_config, get_store, get_token_maker
from posada.core.config import Config
from posada.core.tokens import Clock, Maker
from posada.schemas.auth import RenewAccessTokenRequest, RenewAccessTokenResponse
from posada.services.auth import renew_access_token
from posada.services.store import Store

router = APIRouter()


@router.post("/renew_access", response_model=RenewAccessTokenResponse)
def renew_access(
    body: RenewAccessTokenRequest,
    store: Annotated[Store, Depends(get_store)],
    maker: Annotated[Maker, Depends(get_token_maker)],
    config: Annotated[Config, Depends(get_config)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> RenewAccessTokenResponse:
    """
    Return a new access token for a valid refresh token whose session is still open.
    The refresh token is not rotated; clients keep it until the session expires or is blocked.
    """
    result = renew_access_token(store, maker, config, clock, body.refresh_token)
    return RenewAccessTokenResponse(
        access_token=result.access_token,
        access_token_expires_at=result.access_payload.expired_at,
    )
