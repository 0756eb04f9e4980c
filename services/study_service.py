import dataclasses
from uuid import UUID

from core.config import utcnow
from core.database import TxRunner
from domain.entities import StudyStatus
from repositories.card_repo import CardRepository
from repositories.deck_repo import DeckRepository
from services.card_service import get_deck_card
from services.deck_service import get_owned_deck


def learned_percent(learned_count: int, cards_count: int) -> int:
    if cards_count == 0:
        return 0
    return min(learned_count * 100 // cards_count, 100)


class StudyService:
    def __init__(self, cards: CardRepository, decks: DeckRepository, tx: TxRunner):
        self.card_repo = cards
        self.deck_repo = decks
        self.tx = tx

    def process_study_answer(self, *, deck_id: UUID, user_id: UUID, card_id: UUID, status: StudyStatus) -> int:
        """Flip the card's learned flag and refresh the deck's progress.

        The percentage comes from a fresh count over the whole deck after the
        card is written, not from the single answer. Returns the new
        learned percent.
        """
        with self.tx.atomic():
            deck = get_owned_deck(self.deck_repo, deck_id, user_id)
            card = get_deck_card(self.card_repo, deck, card_id)

            self.card_repo.update(dataclasses.replace(card, is_learned=status == StudyStatus.REMEMBERED))

            percent = learned_percent(self.card_repo.count_learned(deck_id), deck.cards_count)
            self.deck_repo.update(dataclasses.replace(deck, learned_percent=percent, last_studied=utcnow()))
        return percent
