import dataclasses
import logging
from uuid import UUID

from core.database import TxRunner
from domain.entities import Card, Deck, Page
from domain.errors import CardLimitExceeded, CardNotFound
from repositories.card_repo import CardRepository
from repositories.deck_repo import DeckRepository
from services.deck_service import get_owned_deck

logger = logging.getLogger(__name__)

CARD_LIMIT = 30


def get_deck_card(cards: CardRepository, deck: Deck, card_id: UUID) -> Card:
    """A card filed under another deck is reported exactly like a missing one."""
    card = cards.get_by_id(card_id)
    if card is None or card.deck_id != deck.id:
        raise CardNotFound()
    return card


class CardService:
    def __init__(self, cards: CardRepository, decks: DeckRepository, tx: TxRunner):
        self.card_repo = cards
        self.deck_repo = decks
        self.tx = tx

    def get_cards(self, *, deck_id: UUID, user_id: UUID, page: int, size: int) -> Page[Card]:
        get_owned_deck(self.deck_repo, deck_id, user_id)
        cards, total = self.card_repo.list_for_deck(deck_id, page=page, size=size)
        return Page(items=cards, total=total, page=page, size=size)

    def get_all_cards(self, *, deck_id: UUID, user_id: UUID) -> list[Card]:
        get_owned_deck(self.deck_repo, deck_id, user_id)
        return self.card_repo.list_all_for_deck(deck_id)

    def create_card(self, *, deck_id: UUID, user_id: UUID, question: str, answer: str) -> Card:
        with self.tx.atomic():
            deck = get_owned_deck(self.deck_repo, deck_id, user_id)
            if deck.cards_count >= CARD_LIMIT:
                raise CardLimitExceeded(f"A deck cannot have more than {CARD_LIMIT} cards")
            card = self.card_repo.create(deck_id=deck_id, question=question, answer=answer)
            self.deck_repo.update(dataclasses.replace(deck, cards_count=deck.cards_count + 1))
        return card

    def update_card(self, *, deck_id: UUID, card_id: UUID, user_id: UUID, question: str, answer: str) -> Card:
        with self.tx.atomic():
            deck = get_owned_deck(self.deck_repo, deck_id, user_id)
            card = get_deck_card(self.card_repo, deck, card_id)
            updated = self.card_repo.update(dataclasses.replace(card, question=question, answer=answer))
        return updated

    def delete_card(self, *, deck_id: UUID, card_id: UUID, user_id: UUID) -> None:
        with self.tx.atomic():
            deck = get_owned_deck(self.deck_repo, deck_id, user_id)
            get_deck_card(self.card_repo, deck, card_id)
            self.card_repo.delete(card_id)
            self.deck_repo.update(dataclasses.replace(deck, cards_count=max(deck.cards_count - 1, 0)))
