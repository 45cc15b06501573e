import string
import uuid
from decimal import Decimal

import pytest

from conftest import create_owner
from wishlist_app.core.exceptions import NotAuthenticated, NotFound, StorageError, ValidationError
from wishlist_app.schemas.wishlist import ItemCreate, ItemUpdate
from wishlist_app.services import wishlist as wishlist_service


@pytest.mark.anyio
async def test_ensure_wishlist_is_idempotent(session_factory) -> None:
    owner = await create_owner(session_factory)
    async with session_factory() as session:
        first = await wishlist_service.ensure_wishlist(session, owner.id)
    async with session_factory() as session:
        second = await wishlist_service.ensure_wishlist(session, owner.id)
    assert first.id == second.id
    assert first.share_slug == second.share_slug


@pytest.mark.anyio
async def test_ensure_wishlist_lost_race_returns_winner(session_factory, monkeypatch: pytest.MonkeyPatch) -> None:
    owner = await create_owner(session_factory)
    async with session_factory() as session:
        winner = await wishlist_service.ensure_wishlist(session, owner.id)

    real_lookup = wishlist_service._wishlist_for_owner
    calls = []

    async def stale_first_lookup(session, owner_id):
        calls.append(owner_id)
        if len(calls) == 1:
            return None
        return await real_lookup(session, owner_id)

    monkeypatch.setattr(wishlist_service, "_wishlist_for_owner", stale_first_lookup)
    async with session_factory() as session:
        loser = await wishlist_service.ensure_wishlist(session, owner.id)

    assert len(calls) == 2
    assert loser.id == winner.id
    assert loser.share_slug == winner.share_slug


@pytest.mark.anyio
async def test_ensure_wishlist_slug_collision_is_storage_error(
    session_factory, monkeypatch: pytest.MonkeyPatch
) -> None:
    first_owner = await create_owner(session_factory)
    second_owner = await create_owner(session_factory)
    async with session_factory() as session:
        taken = await wishlist_service.ensure_wishlist(session, first_owner.id)

    monkeypatch.setattr(wishlist_service, "generate_share_slug", lambda length=None: taken.share_slug)
    async with session_factory() as session:
        with pytest.raises(StorageError):
            await wishlist_service.ensure_wishlist(session, second_owner.id)
        assert await wishlist_service._wishlist_for_owner(session, second_owner.id) is None


@pytest.mark.anyio
async def test_ensure_wishlist_requires_owner(session_factory) -> None:
    async with session_factory() as session:
        with pytest.raises(NotAuthenticated):
            await wishlist_service.ensure_wishlist(session, None)


@pytest.mark.anyio
async def test_create_then_fetch_matches_fields(session_factory) -> None:
    owner = await create_owner(session_factory)
    async with session_factory() as session:
        wishlist = await wishlist_service.ensure_wishlist(session, owner.id)
        created = await wishlist_service.create_item(
            session,
            wishlist.id,
            ItemCreate(name="Kettle", price=Decimal("39.90"), image="https://img.example.com/k.jpg", link="https://k"),
        )
    async with session_factory() as session:
        fetched = await wishlist_service.fetch_item(session, wishlist.id, created.id)
    assert fetched.name == "Kettle"
    assert fetched.price == Decimal("39.90")
    assert fetched.image == "https://img.example.com/k.jpg"
    assert fetched.link == "https://k"
    assert fetched.created_at is not None


@pytest.mark.anyio
async def test_create_item_validates_before_storage(session_factory) -> None:
    owner = await create_owner(session_factory)
    async with session_factory() as session:
        wishlist = await wishlist_service.ensure_wishlist(session, owner.id)
        with pytest.raises(ValidationError) as excinfo:
            await wishlist_service.create_item(session, wishlist.id, {"name": "", "price": "12", "image": ""})
        assert {err["loc"][0] for err in excinfo.value.errors} == {"name", "image"}
        assert await wishlist_service.list_items(session, wishlist.id) == []


@pytest.mark.anyio
async def test_blank_link_stored_as_none(session_factory) -> None:
    owner = await create_owner(session_factory)
    async with session_factory() as session:
        wishlist = await wishlist_service.ensure_wishlist(session, owner.id)
        item = await wishlist_service.create_item(
            session, wishlist.id, {"name": "Mug", "price": "8", "image": "https://x/m.jpg", "link": "   "}
        )
    assert item.link is None


@pytest.mark.anyio
async def test_update_replaces_only_supplied_fields(session_factory) -> None:
    owner = await create_owner(session_factory)
    async with session_factory() as session:
        wishlist = await wishlist_service.ensure_wishlist(session, owner.id)
        item = await wishlist_service.create_item(
            session, wishlist.id, {"name": "Mug", "price": "8", "image": "https://x/m.jpg"}
        )
        updated = await wishlist_service.update_item(session, wishlist.id, item.id, ItemUpdate(price=Decimal("9.5")))
    assert updated.price == Decimal("9.50")
    assert updated.name == "Mug"
    assert updated.image == "https://x/m.jpg"


@pytest.mark.anyio
async def test_fetch_and_update_scoped_to_wishlist(session_factory) -> None:
    owner_a = await create_owner(session_factory)
    owner_b = await create_owner(session_factory)
    async with session_factory() as session:
        wishlist_a = await wishlist_service.ensure_wishlist(session, owner_a.id)
        wishlist_b = await wishlist_service.ensure_wishlist(session, owner_b.id)
        item = await wishlist_service.create_item(
            session, wishlist_a.id, {"name": "Bike", "price": "300", "image": "https://x/b.jpg"}
        )
        with pytest.raises(NotFound):
            await wishlist_service.fetch_item(session, wishlist_b.id, item.id)
        with pytest.raises(NotFound):
            await wishlist_service.update_item(session, wishlist_b.id, item.id, {"name": "Stolen"})
        await wishlist_service.delete_item(session, wishlist_b.id, item.id)
    async with session_factory() as session:
        still_there = await wishlist_service.fetch_item(session, wishlist_a.id, item.id)
    assert still_there.name == "Bike"


@pytest.mark.anyio
async def test_delete_missing_item_does_not_raise(session_factory) -> None:
    owner = await create_owner(session_factory)
    async with session_factory() as session:
        wishlist = await wishlist_service.ensure_wishlist(session, owner.id)
        item = await wishlist_service.create_item(
            session, wishlist.id, {"name": "Mug", "price": "8", "image": "https://x/m.jpg"}
        )
        await wishlist_service.delete_item(session, wishlist.id, uuid.uuid4())
        remaining = await wishlist_service.list_items(session, wishlist.id)
    assert [row.id for row in remaining] == [item.id]


@pytest.mark.anyio
async def test_regenerate_share_slug_invalidates_previous(session_factory) -> None:
    owner = await create_owner(session_factory)
    async with session_factory() as session:
        wishlist = await wishlist_service.ensure_wishlist(session, owner.id)
        old_slug = wishlist.share_slug
        await wishlist_service.create_item(
            session, wishlist.id, {"name": "Tent", "price": "120", "image": "https://x/t.jpg"}
        )
        updated = await wishlist_service.regenerate_share_slug(session, wishlist.id)
        new_slug = updated.share_slug
    assert new_slug != old_slug

    async with session_factory() as session:
        with pytest.raises(NotFound):
            await wishlist_service.fetch_shared_view(session, old_slug)
        items = await wishlist_service.fetch_shared_view(session, new_slug)
    assert [item.name for item in items] == ["Tent"]


@pytest.mark.anyio
async def test_regenerate_unknown_wishlist(session_factory) -> None:
    async with session_factory() as session:
        with pytest.raises(NotFound):
            await wishlist_service.regenerate_share_slug(session, uuid.uuid4())


@pytest.mark.anyio
async def test_shared_view_rejects_blank_slug(session_factory) -> None:
    async with session_factory() as session:
        with pytest.raises(NotFound) as excinfo:
            await wishlist_service.fetch_shared_view(session, "")
    assert excinfo.value.detail == wishlist_service.SHARE_LINK_INVALID


def test_generate_share_slug_shape() -> None:
    slug = wishlist_service.generate_share_slug()
    assert len(slug) == 12
    assert set(slug) <= set(string.ascii_lowercase + string.digits)
    assert wishlist_service.generate_share_slug() != slug


def test_build_share_url_strips_trailing_slash() -> None:
    assert wishlist_service.build_share_url("abc123", "https://wish.example.com/") == "https://wish.example.com/share/abc123"
