import asyncio
import os
import uuid
from collections.abc import AsyncIterator, Iterator
from typing import Dict

import pytest

# Keep tests off the network and off Postgres before settings are first read.
os.environ["SENTRY_DSN"] = ""
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from wishlist_app.core.security import create_access_token  # noqa: E402
from wishlist_app.db.session import get_session  # noqa: E402
from wishlist_app.main import app  # noqa: E402
from wishlist_app.models import Base, Owner  # noqa: E402


@pytest.fixture(scope="module")
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def session_factory() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def test_app() -> Iterator[Dict[str, object]]:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

    async def init_models() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(init_models())

    async def override_get_session():
        async with SessionLocal() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    client = TestClient(app)
    yield {"client": client, "session_factory": SessionLocal}
    client.close()
    app.dependency_overrides.clear()
    asyncio.run(engine.dispose())


async def create_owner(session_factory, provider_sub: str | None = None) -> Owner:
    async with session_factory() as session:
        owner = Owner(provider_sub=provider_sub or f"sub-{uuid.uuid4().hex[:8]}", email="owner@example.com")
        session.add(owner)
        await session.commit()
        await session.refresh(owner)
        return owner


def create_owner_token(session_factory, provider_sub: str | None = None) -> tuple[str, uuid.UUID]:
    owner = asyncio.run(create_owner(session_factory, provider_sub))
    return create_access_token(str(owner.id)), owner.id


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
