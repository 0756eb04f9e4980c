from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from core.config import as_utc, utcnow
from models.refresh_token import RefreshToken


class RefreshTokenRepository:
    """Issued refresh tokens, keyed by their ``jti``. Flushes only; callers commit."""

    def __init__(self, db: Session):
        self.db = db

    def _find(self, jti: str) -> RefreshToken | None:
        return self.db.execute(select(RefreshToken).where(RefreshToken.jti == jti)).scalar_one_or_none()

    def record(self, *, user_id: UUID, jti: str, expires_at: datetime) -> None:
        self.db.add(RefreshToken(user_id=user_id, jti=jti, expires_at=expires_at))
        self.db.flush()

    def drop_all_for_user(self, user_id: UUID) -> None:
        self.db.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))

    def revoke(self, jti: str) -> bool:
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.jti == jti, RefreshToken.revoked.is_(False))
            .values(revoked=True, revoked_at=utcnow())
        )
        return self.db.execute(stmt).rowcount > 0

    def is_active(self, jti: str) -> bool:
        token = self._find(jti)
        if token is None or token.revoked:
            return False
        if as_utc(token.expires_at) <= utcnow():
            token.mark_revoked()
            self.db.flush()
            return False
        return True

    def check_owner(self, *, jti: str, user_id: UUID) -> None:
        """Raise ``PermissionError`` unless ``jti`` is a live token of ``user_id``."""
        token = self._find(jti)
        if token is None or token.user_id != user_id:
            raise PermissionError("Refresh token is not registered")
        if token.revoked:
            raise PermissionError("Refresh token has been revoked")
        if as_utc(token.expires_at) <= utcnow():
            raise PermissionError("Refresh token has expired")
