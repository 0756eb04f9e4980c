import logging
from uuid import UUID

from authx import TokenPayload
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from core.auth import decode_token, refresh_metadata, security
from core.database import TxRunner, get_db
from core.deps import get_auth_service, get_tx
from domain.errors import Unauthorized
from repositories.refresh_token_repo import RefreshTokenRepository
from schemas.auth import LoginIn, RegisterIn, UserOut
from services.auth_services import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _issue_tokens(response: Response, repo: RefreshTokenRepository, user_id: UUID) -> None:
    access_token = security.create_access_token(uid=str(user_id))
    refresh_token = security.create_refresh_token(uid=str(user_id))

    jti, expires_at = refresh_metadata(decode_token(refresh_token))
    repo.record(user_id=user_id, jti=jti, expires_at=expires_at)

    security.set_access_cookies(access_token, response)
    security.set_refresh_cookies(refresh_token, response)


@router.post("/register", response_model=UserOut, status_code=201)
async def register(data: RegisterIn, svc: AuthService = Depends(get_auth_service)):
    user = svc.register(email=data.email, login=data.login, password=data.password)
    return UserOut.model_validate(user, from_attributes=True)


@router.post("/login")
async def login(
    response: Response,
    data: LoginIn,
    svc: AuthService = Depends(get_auth_service),
    db: Session = Depends(get_db),
    tx: TxRunner = Depends(get_tx),
):
    user = svc.login(login=data.login, password=data.password)
    repo = RefreshTokenRepository(db)
    # one live refresh token per user; a new login signs out other sessions
    with tx.atomic():
        repo.drop_all_for_user(user.id)
        _issue_tokens(response, repo, user.id)
    return {"status": "ok"}


@router.post("/refresh")
async def refresh(
    response: Response,
    payload: TokenPayload = Depends(security.refresh_token_required),
    db: Session = Depends(get_db),
    tx: TxRunner = Depends(get_tx),
):
    try:
        user_id = UUID(str(payload.sub))
    except (TypeError, ValueError) as exc:
        raise Unauthorized("Invalid subject in token") from exc

    if payload.jti is None:
        raise Unauthorized("Token missing identifier")

    repo = RefreshTokenRepository(db)
    try:
        repo.check_owner(jti=payload.jti, user_id=user_id)
    except PermissionError as exc:
        logger.warning("Refused refresh for user %s: %s", user_id, exc)
        raise Unauthorized(str(exc)) from exc

    with tx.atomic():
        repo.revoke(payload.jti)
        _issue_tokens(response, repo, user_id)
    return {"status": "ok"}


@router.post("/logout")
async def logout(
    response: Response,
    payload: TokenPayload = Depends(security.refresh_token_required),
    db: Session = Depends(get_db),
    tx: TxRunner = Depends(get_tx),
):
    if payload.jti:
        with tx.atomic():
            RefreshTokenRepository(db).revoke(payload.jti)
    security.unset_cookies(response)
    return {"ok": True}
