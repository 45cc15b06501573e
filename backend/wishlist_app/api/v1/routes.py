import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wishlist_app.api.v1 import auth
from wishlist_app.api.v1 import share
from wishlist_app.api.v1 import wishlist
from wishlist_app.core.exceptions import StorageError
from wishlist_app.db.session import get_session
from wishlist_app.schemas.error import PUBLIC_ERROR_RESPONSES

logger = logging.getLogger(__name__)

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(wishlist.router)
api_router.include_router(share.router)


@api_router.get("/health", tags=["health"])
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@api_router.get("/health/ready", tags=["health"], responses={503: PUBLIC_ERROR_RESPONSES[503]})
async def readiness(session: AsyncSession = Depends(get_session)) -> dict[str, str]:
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("readiness_db_unavailable", exc_info=True)
        raise StorageError("Database unavailable") from exc
    return {"status": "ready"}
