from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from core.config import as_utc
from domain import entities
from models.card import Card


def _to_entity(row: Card) -> entities.Card:
    return entities.Card(
        id=row.id,
        deck_id=row.deck_id,
        question=row.question,
        answer=row.answer,
        is_learned=row.is_learned,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


class CardRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, card_id: UUID) -> entities.Card | None:
        stmt = select(Card).where(Card.id == card_id)
        row = self.db.execute(stmt).scalar_one_or_none()
        return _to_entity(row) if row else None

    def list_for_deck(self, deck_id: UUID, *, page: int, size: int) -> tuple[list[entities.Card], int]:
        total = self.count_for_deck(deck_id)
        stmt = (
            select(Card)
            .where(Card.deck_id == deck_id)
            .order_by(Card.created_at.asc(), Card.id.asc())
            .limit(max(size, 0))
            .offset(page * max(size, 0))
        )
        return [_to_entity(row) for row in self.db.execute(stmt).scalars()], total

    def list_all_for_deck(self, deck_id: UUID) -> list[entities.Card]:
        stmt = (
            select(Card)
            .where(Card.deck_id == deck_id)
            .order_by(Card.created_at.asc(), Card.id.asc())
        )
        return [_to_entity(row) for row in self.db.execute(stmt).scalars()]

    def count_for_deck(self, deck_id: UUID) -> int:
        stmt = select(func.count(Card.id)).where(Card.deck_id == deck_id)
        return self.db.execute(stmt).scalar_one()

    def count_learned(self, deck_id: UUID) -> int:
        stmt = select(func.count(Card.id)).where(Card.deck_id == deck_id, Card.is_learned.is_(True))
        return self.db.execute(stmt).scalar_one()

    def create(self, *, deck_id: UUID, question: str, answer: str) -> entities.Card:
        card = Card(deck_id=deck_id, question=question, answer=answer, is_learned=False)
        self.db.add(card)
        self.db.flush()
        return _to_entity(card)

    def copy_all(self, *, source_deck_id: UUID, target_deck_id: UUID) -> int:
        """Copy every card of one deck into another; learned state is not carried over."""
        copied = 0
        for card in self.list_all_for_deck(source_deck_id):
            self.db.add(
                Card(
                    deck_id=target_deck_id,
                    question=card.question,
                    answer=card.answer,
                    is_learned=False,
                )
            )
            copied += 1
        self.db.flush()
        return copied

    def update(self, card: entities.Card) -> entities.Card | None:
        stmt = select(Card).where(Card.id == card.id)
        row = self.db.execute(stmt).scalar_one_or_none()
        if row is None:
            return None
        row.question = card.question
        row.answer = card.answer
        row.is_learned = card.is_learned
        self.db.flush()
        return _to_entity(row)

    def delete(self, card_id: UUID) -> None:
        self.db.execute(delete(Card).where(Card.id == card_id))
