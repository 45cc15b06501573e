import logging
from typing import Any
from urllib.parse import urlencode

import httpx
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from wishlist_app.core import security
from wishlist_app.core.config import settings
from wishlist_app.core.exceptions import NotAuthenticated
from wishlist_app.models.owner import Owner

logger = logging.getLogger(__name__)


def _require_client_credentials() -> tuple[str, str]:
    client_id = (settings.oauth_client_id or "").strip()
    client_secret = (settings.oauth_client_secret or "").strip()
    if not client_id or not client_secret:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Sign-in provider misconfigured")
    return client_id, client_secret


def build_authorize_url(state: str) -> str:
    client_id, _ = _require_client_credentials()
    params = {
        "client_id": client_id,
        "redirect_uri": settings.oauth_redirect_uri,
        "response_type": "code",
        "scope": " ".join(settings.oauth_scopes),
        "state": state,
        "prompt": "select_account",
    }
    return f"{settings.oauth_authorize_url}?{urlencode(params)}"


async def exchange_code(code: str) -> dict[str, Any]:
    """Trade the authorization code for the provider's userinfo payload."""
    client_id, client_secret = _require_client_credentials()
    token_payload = {
        "code": code,
        "client_id": client_id,
        "client_secret": client_secret,
        "redirect_uri": settings.oauth_redirect_uri,
        "grant_type": "authorization_code",
    }
    try:
        async with httpx.AsyncClient(timeout=10) as client:
            token_resp = await client.post(settings.oauth_token_url, data=token_payload)
            if token_resp.status_code != 200:
                logger.warning("oauth_token_exchange_rejected", extra={"status_code": token_resp.status_code})
                raise NotAuthenticated("Sign-in could not be completed")
            access_token = token_resp.json().get("access_token")
            if not access_token:
                raise NotAuthenticated("Sign-in could not be completed")
            info_resp = await client.get(
                settings.oauth_userinfo_url, headers={"Authorization": f"Bearer {access_token}"}
            )
    except httpx.HTTPError:
        logger.warning("oauth_provider_unreachable", exc_info=True)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Sign-in provider unavailable")
    if info_resp.status_code != 200:
        raise NotAuthenticated("Sign-in could not be completed")
    profile = info_resp.json()
    if not isinstance(profile, dict) or not profile.get("sub"):
        raise NotAuthenticated("Sign-in could not be completed")
    return profile


async def get_owner_by_sub(session: AsyncSession, provider_sub: str) -> Owner | None:
    result = await session.execute(select(Owner).where(Owner.provider_sub == provider_sub))
    return result.scalar_one_or_none()


async def upsert_owner(session: AsyncSession, profile: dict[str, Any]) -> Owner:
    provider_sub = str(profile["sub"])
    owner = await get_owner_by_sub(session, provider_sub)
    if owner is None:
        owner = Owner(provider_sub=provider_sub)
        logger.info("owner_created", extra={"provider_sub": provider_sub})
    owner.email = profile.get("email") or owner.email
    owner.name = profile.get("name") or owner.name
    owner.avatar_url = profile.get("picture") or owner.avatar_url
    session.add(owner)
    await session.commit()
    await session.refresh(owner)
    return owner


async def complete_sign_in(
    session: AsyncSession, *, code: str | None, state: str | None, error: str | None = None
) -> tuple[Owner, str]:
    """Finish the provider redirect: report provider errors or exchange the code."""
    if error:
        raise NotAuthenticated(f"Sign-in was not completed: {error}")
    if not code:
        raise NotAuthenticated("Missing authorization code")
    if not security.verify_oauth_state(state):
        raise NotAuthenticated("Invalid sign-in state")
    profile = await exchange_code(code)
    owner = await upsert_owner(session, profile)
    return owner, security.create_access_token(str(owner.id))
