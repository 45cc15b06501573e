import logging
import secrets
import string
import uuid
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wishlist_app.core.config import settings
from wishlist_app.core.exceptions import NotAuthenticated, NotFound, StorageError, ValidationError
from wishlist_app.models.wishlist import Wishlist, WishlistItem
from wishlist_app.schemas.wishlist import ItemCreate, ItemUpdate

logger = logging.getLogger(__name__)

SHARE_SLUG_ALPHABET = string.ascii_lowercase + string.digits
SHARE_LINK_INVALID = "This wishlist link is invalid or has been disabled."
ITEM_NOT_FOUND = "Item not found"

FieldsT = TypeVar("FieldsT", ItemCreate, ItemUpdate)


def generate_share_slug(length: int | None = None) -> str:
    size = length or settings.share_slug_length
    return "".join(secrets.choice(SHARE_SLUG_ALPHABET) for _ in range(size))


def build_share_url(slug: str, origin: str | None = None) -> str:
    base = (origin or settings.frontend_origin).rstrip("/")
    return f"{base}/share/{slug}"


def _validated(model: type[FieldsT], fields: FieldsT | Mapping[str, Any]) -> FieldsT:
    if isinstance(fields, model):
        return fields
    raw = fields.model_dump(exclude_unset=True) if isinstance(fields, BaseModel) else dict(fields)
    try:
        return model.model_validate(raw)
    except PydanticValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False, include_input=False)
        raise ValidationError("Invalid item fields", errors=errors) from exc


@asynccontextmanager
async def _storage_guard(session: AsyncSession, action: str) -> AsyncIterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("wishlist_storage_failed", extra={"action": action})
        raise StorageError() from exc


async def _wishlist_for_owner(session: AsyncSession, owner_id: uuid.UUID) -> Wishlist | None:
    result = await session.execute(select(Wishlist).where(Wishlist.owner_id == owner_id))
    return result.scalar_one_or_none()


async def ensure_wishlist(session: AsyncSession, owner_id: uuid.UUID | None) -> Wishlist:
    """Return the owner's wishlist, creating it with a fresh share slug on first access.

    The unique constraint on ``owner_id`` keeps it to one wishlist per owner: a
    concurrent request that loses the insert race reads back the winner's row.
    """
    if owner_id is None:
        raise NotAuthenticated()
    async with _storage_guard(session, "ensure_wishlist"):
        existing = await _wishlist_for_owner(session, owner_id)
        if existing is not None:
            return existing

        wishlist = Wishlist(owner_id=owner_id, share_slug=generate_share_slug())
        session.add(wishlist)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            existing = await _wishlist_for_owner(session, owner_id)
            if existing is None:
                # share slug collision; surfaced as a storage conflict
                raise
            return existing
        await session.refresh(wishlist)
        logger.info("wishlist_created", extra={"owner_id": str(owner_id), "wishlist_id": str(wishlist.id)})
        return wishlist


async def list_items(session: AsyncSession, wishlist_id: uuid.UUID) -> list[WishlistItem]:
    async with _storage_guard(session, "list_items"):
        result = await session.execute(
            select(WishlistItem)
            .where(WishlistItem.wishlist_id == wishlist_id)
            .order_by(WishlistItem.created_at.desc(), WishlistItem.id.desc())
        )
        return list(result.scalars().all())


async def create_item(
    session: AsyncSession, wishlist_id: uuid.UUID, fields: ItemCreate | Mapping[str, Any]
) -> WishlistItem:
    data = _validated(ItemCreate, fields)
    async with _storage_guard(session, "create_item"):
        item = WishlistItem(wishlist_id=wishlist_id, **data.model_dump())
        session.add(item)
        await session.commit()
        await session.refresh(item)
        return item


async def fetch_item(session: AsyncSession, wishlist_id: uuid.UUID, item_id: uuid.UUID) -> WishlistItem:
    async with _storage_guard(session, "fetch_item"):
        result = await session.execute(
            select(WishlistItem).where(WishlistItem.wishlist_id == wishlist_id, WishlistItem.id == item_id)
        )
        item = result.scalar_one_or_none()
    if item is None:
        raise NotFound(ITEM_NOT_FOUND)
    return item


async def update_item(
    session: AsyncSession,
    wishlist_id: uuid.UUID,
    item_id: uuid.UUID,
    fields: ItemUpdate | Mapping[str, Any],
) -> WishlistItem:
    data = _validated(ItemUpdate, fields)
    item = await fetch_item(session, wishlist_id, item_id)
    async with _storage_guard(session, "update_item"):
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(item, key, value)
        session.add(item)
        await session.commit()
        await session.refresh(item)
        return item


async def delete_item(session: AsyncSession, wishlist_id: uuid.UUID, item_id: uuid.UUID) -> None:
    async with _storage_guard(session, "delete_item"):
        await session.execute(
            delete(WishlistItem).where(WishlistItem.wishlist_id == wishlist_id, WishlistItem.id == item_id)
        )
        await session.commit()


async def regenerate_share_slug(session: AsyncSession, wishlist_id: uuid.UUID) -> Wishlist:
    async with _storage_guard(session, "regenerate_share_slug"):
        wishlist = await session.get(Wishlist, wishlist_id)
        if wishlist is None:
            raise NotFound("Wishlist not found")
        wishlist.share_slug = generate_share_slug()
        session.add(wishlist)
        await session.commit()
        await session.refresh(wishlist)
    logger.info("share_slug_regenerated", extra={"wishlist_id": str(wishlist_id)})
    return wishlist


async def get_wishlist_by_slug(session: AsyncSession, slug: str) -> Wishlist:
    if not slug:
        raise NotFound(SHARE_LINK_INVALID)
    async with _storage_guard(session, "get_wishlist_by_slug"):
        result = await session.execute(select(Wishlist).where(Wishlist.share_slug == slug))
        wishlist = result.scalar_one_or_none()
    if wishlist is None:
        raise NotFound(SHARE_LINK_INVALID)
    return wishlist


async def fetch_shared_view(session: AsyncSession, slug: str) -> list[WishlistItem]:
    wishlist = await get_wishlist_by_slug(session, slug)
    return await list_items(session, wishlist.id)
