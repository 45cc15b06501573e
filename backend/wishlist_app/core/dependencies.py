from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from wishlist_app.core.exceptions import NotAuthenticated
from wishlist_app.core.security import decode_token
from wishlist_app.db.session import get_session
from wishlist_app.models.owner import Owner
from wishlist_app.models.wishlist import Wishlist
from wishlist_app.services import wishlist as wishlist_service

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_owner(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_session),
) -> Owner:
    if credentials is None:
        raise NotAuthenticated()

    payload = decode_token(credentials.credentials)
    if not payload or payload.get("type") != "access":
        raise NotAuthenticated("Invalid token")

    try:
        owner_id = UUID(str(payload.get("sub")))
    except ValueError:
        raise NotAuthenticated("Invalid token payload")

    result = await session.execute(select(Owner).where(Owner.id == owner_id))
    owner = result.scalar_one_or_none()
    if owner is None:
        raise NotAuthenticated("Owner not found")
    return owner


async def get_owner_wishlist(
    owner: Owner = Depends(get_current_owner),
    session: AsyncSession = Depends(get_session),
) -> Wishlist:
    return await wishlist_service.ensure_wishlist(session, owner.id)
