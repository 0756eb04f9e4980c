from uuid import UUID

from authx import TokenPayload
from fastapi import Depends
from sqlalchemy.orm import Session

from core.config import get_settings
from core.database import TxRunner, get_db
from core.auth import security
from domain.errors import Unauthorized
from repositories.card_repo import CardRepository
from repositories.deck_repo import DeckRepository
from repositories.deck_share_repo import DeckShareRepository
from repositories.user_repo import UserRepository
from services.auth_services import AuthService
from services.card_service import CardService
from services.deck_service import DeckService
from services.share_service import ShareService
from services.study_service import StudyService
from services.user_services import UserService


def get_tx(db: Session = Depends(get_db)) -> TxRunner:
    return TxRunner(db)


def get_current_user_id(
    payload: TokenPayload = Depends(security.access_token_required),
    db: Session = Depends(get_db),
) -> UUID:
    try:
        user_id = UUID(str(payload.sub))
    except (TypeError, ValueError) as exc:
        raise Unauthorized("Invalid subject in token") from exc
    # a token outlives the account it was issued for
    if UserRepository(db).get_by_id(user_id) is None:
        raise Unauthorized("Account no longer exists")
    return user_id


def get_auth_service(db: Session = Depends(get_db), tx: TxRunner = Depends(get_tx)) -> AuthService:
    return AuthService(UserRepository(db), tx)


def get_user_service(db: Session = Depends(get_db), tx: TxRunner = Depends(get_tx)) -> UserService:
    return UserService(UserRepository(db), tx)


def get_deck_service(db: Session = Depends(get_db), tx: TxRunner = Depends(get_tx)) -> DeckService:
    return DeckService(DeckRepository(db), tx)


def get_card_service(db: Session = Depends(get_db), tx: TxRunner = Depends(get_tx)) -> CardService:
    return CardService(CardRepository(db), DeckRepository(db), tx)


def get_study_service(db: Session = Depends(get_db), tx: TxRunner = Depends(get_tx)) -> StudyService:
    return StudyService(CardRepository(db), DeckRepository(db), tx)


def get_share_service(
    db: Session = Depends(get_db),
    tx: TxRunner = Depends(get_tx),
    deck_service: DeckService = Depends(get_deck_service),
) -> ShareService:
    """The nested DeckService shares ``tx`` so an import commits once."""
    return ShareService(
        deck_service,
        DeckShareRepository(db),
        DeckRepository(db),
        CardRepository(db),
        tx,
        url_prefix=get_settings().SHARE_URL_PREFIX,
    )
