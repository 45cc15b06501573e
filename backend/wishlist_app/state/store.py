"""
In-memory application state for a signed-in owner's wishlist.

``WishlistStore`` is handed to whatever renders the owner's view. All mutation
goes through its action coroutines, each of which follows the same cycle: set
``loading``, call the data-access layer, refresh the item list on success, and
on failure record a user-facing message while leaving the snapshot untouched.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import asdict, dataclass, field
from typing import Literal

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wishlist_app.core.exceptions import NotAuthenticated, ValidationError, WishlistError
from wishlist_app.schemas.wishlist import ItemRead, WishlistRead
from wishlist_app.services import wishlist as wishlist_service

logger = logging.getLogger(__name__)

NoticeLevel = Literal["success", "error"]


@dataclass
class ItemForm:
    """Raw add/edit form fields, validated into ``ItemCreate``/``ItemUpdate`` on submit."""

    name: str = ""
    price: str = ""
    image: str = ""
    link: str = ""

    @classmethod
    def from_item(cls, item: ItemRead) -> ItemForm:
        return cls(name=item.name, price=f"{item.price:.2f}", image=item.image, link=item.link or "")

    def to_fields(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str


@dataclass
class WishlistStore:
    session_factory: async_sessionmaker[AsyncSession]
    owner_id: uuid.UUID | None = None
    origin: str | None = None

    products: list[ItemRead] = field(default_factory=list)
    wishlist: WishlistRead | None = None
    share_url: str | None = None
    current_product: ItemRead | None = None
    form: ItemForm = field(default_factory=ItemForm)
    loading: bool = False
    error: str | None = None
    notices: list[Notice] = field(default_factory=list)

    def _notify(self, level: NoticeLevel, message: str) -> None:
        self.notices.append(Notice(level, message))

    def _fail(self, message: str) -> None:
        self.error = message
        self._notify("error", message)

    def _clear_snapshot(self) -> None:
        self.wishlist = None
        self.share_url = None
        self.products = []
        self.current_product = None

    def set_form(self, **fields: str) -> None:
        self.form = ItemForm(**{**self.form.to_fields(), **fields})

    def reset_form(self) -> None:
        self.form = ItemForm()

    def sign_in(self, owner_id: uuid.UUID) -> None:
        if owner_id != self.owner_id:
            self._clear_snapshot()
        self.owner_id = owner_id

    def sign_out(self) -> None:
        self.owner_id = None
        self._clear_snapshot()
        self.reset_form()

    async def ensure_wishlist(self) -> WishlistRead | None:
        if self.owner_id is None:
            self._clear_snapshot()
            return None
        if self.wishlist is not None:
            return self.wishlist

        async with self.session_factory() as session:
            wishlist = await wishlist_service.ensure_wishlist(session, self.owner_id)
        self._remember_wishlist(wishlist.id, wishlist.share_slug)
        return self.wishlist

    def _remember_wishlist(self, wishlist_id: uuid.UUID, slug: str) -> None:
        self.share_url = wishlist_service.build_share_url(slug, self.origin)
        self.wishlist = WishlistRead(id=wishlist_id, share_slug=slug, share_url=self.share_url)

    async def _require_wishlist(self) -> WishlistRead:
        wishlist = await self.ensure_wishlist()
        if wishlist is None:
            raise NotAuthenticated()
        return wishlist

    async def fetch_products(self) -> None:
        self.loading = True
        self.error = None
        try:
            wishlist = await self.ensure_wishlist()
            if wishlist is None:
                self.products = []
                return
            async with self.session_factory() as session:
                items = await wishlist_service.list_items(session, wishlist.id)
            self.products = [ItemRead.model_validate(item) for item in items]
        except WishlistError:
            logger.warning("store_fetch_products_failed", exc_info=True)
            self.error = "Failed to load wishlist"
        finally:
            self.loading = False

    async def add_product(self) -> ItemRead | None:
        self.loading = True
        try:
            wishlist = await self._require_wishlist()
            async with self.session_factory() as session:
                item = await wishlist_service.create_item(session, wishlist.id, self.form.to_fields())
            created = ItemRead.model_validate(item)
        except ValidationError:
            self._fail("Please fill in a name, a valid price and an image")
            return None
        except WishlistError:
            logger.warning("store_add_product_failed", exc_info=True)
            self._fail("Something went wrong")
            return None
        finally:
            self.loading = False

        await self.fetch_products()
        self.reset_form()
        self._notify("success", "Item added to your wishlist")
        return created

    async def fetch_product(self, item_id: uuid.UUID) -> ItemRead | None:
        self.loading = True
        try:
            wishlist = await self._require_wishlist()
            async with self.session_factory() as session:
                item = await wishlist_service.fetch_item(session, wishlist.id, item_id)
            self.current_product = ItemRead.model_validate(item)
            self.form = ItemForm.from_item(self.current_product)
            self.error = None
            return self.current_product
        except WishlistError:
            self.current_product = None
            self.error = "Unable to load item details"
            return None
        finally:
            self.loading = False

    async def update_product(self, item_id: uuid.UUID) -> ItemRead | None:
        self.loading = True
        try:
            wishlist = await self._require_wishlist()
            async with self.session_factory() as session:
                item = await wishlist_service.update_item(session, wishlist.id, item_id, self.form.to_fields())
            updated = ItemRead.model_validate(item)
        except ValidationError:
            self._fail("Please fill in a name, a valid price and an image")
            return None
        except WishlistError:
            logger.warning("store_update_product_failed", exc_info=True)
            self._fail("Something went wrong")
            return None
        finally:
            self.loading = False

        self.current_product = updated
        self.form = ItemForm.from_item(updated)
        self._notify("success", "Wishlist item updated")
        await self.fetch_products()
        return updated

    async def delete_product(self, item_id: uuid.UUID) -> None:
        self.loading = True
        try:
            wishlist = await self._require_wishlist()
            async with self.session_factory() as session:
                await wishlist_service.delete_item(session, wishlist.id, item_id)
        except WishlistError:
            logger.warning("store_delete_product_failed", exc_info=True)
            self._fail("Something went wrong")
            return
        finally:
            self.loading = False

        if self.current_product is not None and self.current_product.id == item_id:
            self.current_product = None
        self._notify("success", "Item removed")
        await self.fetch_products()

    async def regenerate_share_link(self) -> str | None:
        if self.owner_id is None:
            self._notify("error", "Please sign in first")
            return None
        self.loading = True
        try:
            wishlist = await self._require_wishlist()
            async with self.session_factory() as session:
                updated = await wishlist_service.regenerate_share_slug(session, wishlist.id)
        except WishlistError:
            logger.warning("store_regenerate_share_link_failed", exc_info=True)
            self._fail("Could not regenerate link")
            return None
        finally:
            self.loading = False

        self._remember_wishlist(updated.id, updated.share_slug)
        self._notify("success", "Share link updated")
        return self.share_url
