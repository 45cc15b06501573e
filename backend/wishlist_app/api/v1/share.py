from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wishlist_app.db.session import get_session
from wishlist_app.schemas.error import PUBLIC_ERROR_RESPONSES
from wishlist_app.schemas.wishlist import ItemRead, SharedWishlistRead
from wishlist_app.services import wishlist as wishlist_service

router = APIRouter(prefix="/share", tags=["share"], responses=PUBLIC_ERROR_RESPONSES)


@router.get("/{slug}", response_model=SharedWishlistRead)
async def read_shared_wishlist(slug: str, session: AsyncSession = Depends(get_session)) -> SharedWishlistRead:
    items = await wishlist_service.fetch_shared_view(session, slug)
    return SharedWishlistRead(share_slug=slug, items=[ItemRead.model_validate(item) for item in items])
