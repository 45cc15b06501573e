"""Server-rendered pages: the public share view and the sign-in redirect target."""

import logging
from pathlib import Path
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, status
from fastapi.responses import HTMLResponse, RedirectResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape
from sqlalchemy.ext.asyncio import AsyncSession

from wishlist_app.core.config import settings
from wishlist_app.core.exceptions import NotAuthenticated, NotFound, StorageError
from wishlist_app.db.session import get_session
from wishlist_app.services import auth as auth_service
from wishlist_app.services import wishlist as wishlist_service

logger = logging.getLogger(__name__)

TEMPLATE_PATH = Path(__file__).parent.parent / "templates" / "pages"
env = Environment(loader=FileSystemLoader(TEMPLATE_PATH), autoescape=select_autoescape(["html", "xml", "j2"]))

router = APIRouter(include_in_schema=False)


def render(template: str, status_code: int = status.HTTP_200_OK, **context) -> HTMLResponse:
    context.setdefault("app_name", settings.app_name)
    context.setdefault("home_url", settings.frontend_origin.rstrip("/") + "/")
    body = env.get_template(template).render(**context)
    return HTMLResponse(content=body, status_code=status_code)


@router.get("/share/{slug}", response_class=HTMLResponse)
async def shared_wishlist_page(slug: str, session: AsyncSession = Depends(get_session)) -> HTMLResponse:
    try:
        items = await wishlist_service.fetch_shared_view(session, slug)
    except NotFound as exc:
        return render(
            "unavailable.html.j2",
            status.HTTP_404_NOT_FOUND,
            heading="Link not available",
            message=exc.detail,
        )
    except StorageError:
        return render(
            "unavailable.html.j2",
            status.HTTP_503_SERVICE_UNAVAILABLE,
            heading="Link not available",
            message="Unable to load shared wishlist.",
        )
    rows = [
        {"name": item.name, "image": item.image, "link": item.link, "price_label": f"{item.price:.2f}"}
        for item in items
    ]
    return render("share.html.j2", items=rows)


@router.get("/auth/callback", response_model=None)
async def auth_callback_page(
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    session: AsyncSession = Depends(get_session),
) -> HTMLResponse | RedirectResponse:
    try:
        _, access_token = await auth_service.complete_sign_in(session, code=code, state=state, error=error)
    except NotAuthenticated as exc:
        logger.info("sign_in_callback_rejected", extra={"reason": exc.detail})
        return render(
            "unavailable.html.j2",
            status.HTTP_401_UNAUTHORIZED,
            heading="Sign in failed",
            message=exc.detail,
        )
    fragment = urlencode({"access_token": access_token, "token_type": "bearer"})
    return RedirectResponse(f"{settings.frontend_origin.rstrip('/')}/#{fragment}", status_code=status.HTTP_303_SEE_OTHER)
