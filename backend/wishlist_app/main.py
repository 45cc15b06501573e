from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from wishlist_app.api.v1 import api_router
from wishlist_app.core.config import settings
from wishlist_app.core.exceptions import NotAuthenticated, ValidationError, WishlistError
from wishlist_app.core.logging_config import configure_logging
from wishlist_app.core.sentry import init_sentry
from wishlist_app.core.startup_checks import validate_production_settings
from wishlist_app.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from wishlist_app.pages import router as pages_router
from wishlist_app.schemas.error import ErrorResponse


def get_application() -> FastAPI:
    configure_logging(settings.log_json)
    validate_production_settings()
    init_sentry()
    tags_metadata = [
        {"name": "auth", "description": "Sign-in through the identity provider"},
        {"name": "wishlist", "description": "Owner-scoped wishlist items and share link"},
        {"name": "share", "description": "Public read-only shared wishlists"},
        {"name": "health", "description": "Liveness and readiness probes"},
    ]
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        openapi_tags=tags_metadata,
        swagger_ui_parameters={"displayRequestDuration": True},
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.include_router(api_router, prefix="/api/v1")
    app.include_router(pages_router)

    @app.exception_handler(WishlistError)
    async def wishlist_exception_handler(request: Request, exc: WishlistError):
        detail = exc.errors if isinstance(exc, ValidationError) and exc.errors else exc.detail
        payload = ErrorResponse(detail=detail, code=exc.code)
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, NotAuthenticated) else None
        return JSONResponse(
            status_code=exc.status_code, content=jsonable_encoder(payload.model_dump()), headers=headers
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        payload = ErrorResponse(detail=exc.detail, code=None)
        return JSONResponse(
            status_code=exc.status_code, content=jsonable_encoder(payload.model_dump()), headers=exc.headers
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = jsonable_encoder(exc.errors())
        payload = ErrorResponse(detail=errors, code="validation_error")
        return JSONResponse(status_code=422, content=payload.model_dump())

    return app


app = get_application()
