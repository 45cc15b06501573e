from __future__ import annotations

import logging

from wishlist_app.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def _is_production(settings: Settings) -> bool:
    env = (settings.environment or "").strip().lower()
    return env in {"prod", "production"}


def _looks_like_localhost(url: str | None) -> bool:
    value = (url or "").strip().lower()
    if not value:
        return False
    return "localhost" in value or "127.0.0.1" in value


def _append_if(problems: list[str], *, condition: bool, message: str) -> None:
    if condition:
        problems.append(message)


def collect_problems(settings: Settings) -> list[str]:
    problems: list[str] = []
    secret = (settings.secret_key or "").strip()
    _append_if(
        problems,
        condition=secret in {"", "dev-secret-key"} or len(secret) < 32,
        message="SECRET_KEY must be set to a strong random value (not the dev default).",
    )
    _append_if(
        problems,
        condition=not (settings.oauth_client_id or "").strip() or not (settings.oauth_client_secret or "").strip(),
        message="OAUTH_CLIENT_ID and OAUTH_CLIENT_SECRET must be configured in production.",
    )
    _append_if(
        problems,
        condition=_looks_like_localhost(settings.frontend_origin),
        message="FRONTEND_ORIGIN must be set to the public site origin (not localhost) in production.",
    )
    _append_if(
        problems,
        condition=_looks_like_localhost(settings.oauth_redirect_uri),
        message="OAUTH_REDIRECT_URI must point at the public callback URL in production.",
    )
    _append_if(
        problems,
        condition=settings.database_url.startswith("sqlite"),
        message="DATABASE_URL must not use SQLite in production.",
    )
    _append_if(
        problems,
        condition=not (settings.sentry_dsn or "").strip(),
        message="SENTRY_DSN must be configured in production.",
    )
    return problems


def validate_production_settings(settings: Settings | None = None) -> None:
    settings = settings or default_settings
    if not _is_production(settings):
        return
    problems = collect_problems(settings)
    if problems:
        for problem in problems:
            logger.error("startup_check_failed", extra={"problem": problem})
        raise RuntimeError("Unsafe production configuration:\n- " + "\n- ".join(problems))
