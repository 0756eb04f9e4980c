from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from core.config import as_utc
from domain import entities
from models.deck import Deck


def _to_entity(row: Deck) -> entities.Deck:
    return entities.Deck(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        description=row.description,
        cards_count=row.cards_count,
        learned_percent=row.learned_percent,
        last_studied=as_utc(row.last_studied),
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


class DeckRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, deck_id: UUID) -> entities.Deck | None:
        stmt = select(Deck).where(Deck.id == deck_id)
        row = self.db.execute(stmt).scalar_one_or_none()
        return _to_entity(row) if row else None

    def list_for_user(self, user_id: UUID, *, page: int, size: int) -> tuple[list[entities.Deck], int]:
        total = self.count_for_user(user_id)
        stmt = (
            select(Deck)
            .where(Deck.user_id == user_id)
            .order_by(Deck.created_at.desc(), Deck.id.desc())
            .limit(max(size, 0))
            .offset(page * max(size, 0))
        )
        return [_to_entity(row) for row in self.db.execute(stmt).scalars()], total

    def count_for_user(self, user_id: UUID) -> int:
        stmt = select(func.count(Deck.id)).where(Deck.user_id == user_id)
        return self.db.execute(stmt).scalar_one()

    def name_taken(self, user_id: UUID, name: str, *, exclude_id: UUID | None = None) -> bool:
        stmt = select(Deck.id).where(Deck.user_id == user_id, Deck.name == name)
        if exclude_id is not None:
            # Ensure another deck owned by the same user does not already use this name
            stmt = stmt.where(Deck.id != exclude_id)
        return self.db.execute(stmt.limit(1)).first() is not None

    def create(self, *, user_id: UUID, name: str, description: str | None) -> entities.Deck:
        deck = Deck(
            user_id=user_id,
            name=name,
            description=description,
            cards_count=0,
            learned_percent=0,
            last_studied=None,
        )
        self.db.add(deck)
        self.db.flush()
        return _to_entity(deck)

    def update(self, deck: entities.Deck) -> entities.Deck | None:
        row = self.db.get(Deck, deck.id)
        if row is None:
            return None
        row.name = deck.name
        row.description = deck.description
        row.cards_count = deck.cards_count
        row.learned_percent = deck.learned_percent
        row.last_studied = deck.last_studied
        self.db.flush()
        return _to_entity(row)

    def delete(self, deck_id: UUID) -> None:
        self.db.execute(delete(Deck).where(Deck.id == deck_id))
