from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from models.deck_share import DeckShare


class DeckShareRepository:
    def __init__(self, db: Session):
        self.db = db

    def save_token(self, *, token: UUID, deck_id: UUID) -> None:
        self.db.add(DeckShare(token=token, deck_id=deck_id))
        self.db.flush()

    def find_deck_id(self, token: UUID) -> UUID | None:
        stmt = select(DeckShare.deck_id).where(DeckShare.token == token)
        return self.db.execute(stmt).scalar_one_or_none()

    def list_tokens(self, deck_id: UUID) -> list[UUID]:
        stmt = select(DeckShare.token).where(DeckShare.deck_id == deck_id)
        return list(self.db.execute(stmt).scalars())

    def delete_token(self, token: UUID) -> bool:
        result = self.db.execute(delete(DeckShare).where(DeckShare.token == token))
        return result.rowcount > 0
