import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt

from wishlist_app.core.config import settings


def _create_token(subject: str, token_type: str, expires_delta: timedelta, **claims: Any) -> str:
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"sub": subject, "type": token_type, "exp": expire, **claims}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(subject: str) -> str:
    return _create_token(subject, "access", timedelta(minutes=settings.access_token_exp_minutes))


def create_oauth_state() -> str:
    """Signed, short-lived state value carried through the provider redirect."""
    return _create_token(
        "oauth",
        "oauth_state",
        timedelta(minutes=settings.oauth_state_exp_minutes),
        nonce=secrets.token_urlsafe(16),
    )


def verify_oauth_state(state: str | None) -> bool:
    if not state:
        return False
    payload = decode_token(state)
    return bool(payload and payload.get("type") == "oauth_state")


def decode_token(token: str) -> Optional[dict[str, Any]]:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
