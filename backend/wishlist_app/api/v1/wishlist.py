import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from wishlist_app.core.dependencies import get_owner_wishlist
from wishlist_app.db.session import get_session
from wishlist_app.models.wishlist import Wishlist
from wishlist_app.schemas.error import OWNER_ERROR_RESPONSES
from wishlist_app.schemas.wishlist import ItemCreate, ItemRead, ItemUpdate, WishlistRead
from wishlist_app.services import wishlist as wishlist_service

router = APIRouter(prefix="/wishlist", tags=["wishlist"], responses=OWNER_ERROR_RESPONSES)


def _wishlist_read(wishlist: Wishlist) -> WishlistRead:
    return WishlistRead(
        id=wishlist.id,
        share_slug=wishlist.share_slug,
        share_url=wishlist_service.build_share_url(wishlist.share_slug),
    )


@router.get("", response_model=WishlistRead)
async def read_wishlist(wishlist: Wishlist = Depends(get_owner_wishlist)) -> WishlistRead:
    return _wishlist_read(wishlist)


@router.post("/share/regenerate", response_model=WishlistRead)
async def regenerate_share_link(
    wishlist: Wishlist = Depends(get_owner_wishlist),
    session: AsyncSession = Depends(get_session),
) -> WishlistRead:
    updated = await wishlist_service.regenerate_share_slug(session, wishlist.id)
    return _wishlist_read(updated)


@router.get("/items", response_model=list[ItemRead])
async def list_items(
    wishlist: Wishlist = Depends(get_owner_wishlist),
    session: AsyncSession = Depends(get_session),
) -> list[ItemRead]:
    items = await wishlist_service.list_items(session, wishlist.id)
    return [ItemRead.model_validate(item) for item in items]


@router.post("/items", response_model=ItemRead, status_code=status.HTTP_201_CREATED)
async def create_item(
    payload: ItemCreate,
    wishlist: Wishlist = Depends(get_owner_wishlist),
    session: AsyncSession = Depends(get_session),
) -> ItemRead:
    item = await wishlist_service.create_item(session, wishlist.id, payload)
    return ItemRead.model_validate(item)


@router.get("/items/{item_id}", response_model=ItemRead)
async def read_item(
    item_id: uuid.UUID,
    wishlist: Wishlist = Depends(get_owner_wishlist),
    session: AsyncSession = Depends(get_session),
) -> ItemRead:
    item = await wishlist_service.fetch_item(session, wishlist.id, item_id)
    return ItemRead.model_validate(item)


@router.patch("/items/{item_id}", response_model=ItemRead)
async def update_item(
    item_id: uuid.UUID,
    payload: ItemUpdate,
    wishlist: Wishlist = Depends(get_owner_wishlist),
    session: AsyncSession = Depends(get_session),
) -> ItemRead:
    item = await wishlist_service.update_item(session, wishlist.id, item_id, payload)
    return ItemRead.model_validate(item)


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: uuid.UUID,
    wishlist: Wishlist = Depends(get_owner_wishlist),
    session: AsyncSession = Depends(get_session),
) -> None:
    await wishlist_service.delete_item(session, wishlist.id, item_id)
    return None
