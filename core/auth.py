import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from authx import AuthX, AuthXConfig, TokenPayload

from core.config import settings
from core.database import SessionLocal, TxRunner
from repositories.refresh_token_repo import RefreshTokenRepository

logger = logging.getLogger(__name__)

_cookie_samesite = settings.JWT_COOKIE_SAMESITE.lower() if settings.JWT_COOKIE_SAMESITE else None
_cookie_domain = settings.JWT_COOKIE_DOMAIN or None

config = AuthXConfig(
    JWT_SECRET_KEY=settings.SECRET_KEY,
    JWT_ALGORITHM=settings.JWT_ALG,
    JWT_ACCESS_TOKEN_EXPIRES=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    JWT_REFRESH_TOKEN_EXPIRES=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    JWT_TOKEN_LOCATION=["cookies"],
    JWT_ACCESS_COOKIE_NAME=settings.JWT_ACCESS_COOKIE_NAME,
    JWT_REFRESH_COOKIE_NAME=settings.JWT_REFRESH_COOKIE_NAME,
    JWT_COOKIE_SAMESITE=_cookie_samesite or "lax",
    JWT_COOKIE_SECURE=settings.JWT_COOKIE_SECURE,
    JWT_COOKIE_DOMAIN=_cookie_domain,
    JWT_COOKIE_CSRF_PROTECT=settings.JWT_COOKIE_CSRF_PROTECT,
)

security = AuthX(config=config)


def decode_token(token: str) -> TokenPayload:
    return TokenPayload.decode(
        token=token,
        key=security.config.public_key,
        algorithms=[security.config.JWT_ALGORITHM],
    )


def _exp_to_datetime(exp_value: float | int | datetime) -> datetime:
    if isinstance(exp_value, datetime):
        return exp_value if exp_value.tzinfo else exp_value.replace(tzinfo=timezone.utc)
    return datetime.fromtimestamp(exp_value, tz=timezone.utc)


def refresh_metadata(payload: TokenPayload) -> tuple[str, datetime]:
    if payload.jti is None:
        raise ValueError("Refresh token does not contain jti")
    if payload.exp is None:
        raise ValueError("Refresh token missing expiry")
    return payload.jti, _exp_to_datetime(payload.exp)


def _is_token_revoked(token: str, **_: Any) -> bool:
    try:
        payload = decode_token(token)
    except Exception:
        logger.debug("Undecodable token treated as revoked")
        return True

    if payload.type != "refresh" or payload.jti is None:
        return False

    db = SessionLocal()
    try:
        with TxRunner(db).atomic():
            active = RefreshTokenRepository(db).is_active(payload.jti)
        return not active
    finally:
        db.close()


security.set_token_blocklist(_is_token_revoked)
