from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wishlist_app.core import security
from wishlist_app.core.dependencies import get_current_owner
from wishlist_app.db.session import get_session
from wishlist_app.models.owner import Owner
from wishlist_app.schemas.auth import (
    AuthResponse,
    OAuthCallbackRequest,
    OAuthStartResponse,
    OwnerResponse,
    TokenResponse,
)
from wishlist_app.services import auth as auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/oauth/start", response_model=OAuthStartResponse)
async def oauth_start() -> OAuthStartResponse:
    state = security.create_oauth_state()
    return OAuthStartResponse(auth_url=auth_service.build_authorize_url(state), state=state)


@router.post("/oauth/callback", response_model=AuthResponse)
async def oauth_callback(
    payload: OAuthCallbackRequest,
    session: AsyncSession = Depends(get_session),
) -> AuthResponse:
    owner, access_token = await auth_service.complete_sign_in(
        session, code=payload.code, state=payload.state, error=payload.error
    )
    return AuthResponse(owner=OwnerResponse.model_validate(owner), tokens=TokenResponse(access_token=access_token))


@router.get("/me", response_model=OwnerResponse)
async def read_me(current_owner: Owner = Depends(get_current_owner)) -> OwnerResponse:
    return OwnerResponse.model_validate(current_owner)
