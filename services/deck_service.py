import dataclasses
import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from core.database import TxRunner
from domain.entities import Deck, Page
from domain.errors import DeckConflict, DeckLimitExceeded, DeckNotFound
from domain.policy import authorize
from repositories.deck_repo import DeckRepository

logger = logging.getLogger(__name__)

DECK_LIMIT = 30

NAME_CONSTRAINT = "uq_decks_user_name"


def is_name_clash(exc: IntegrityError) -> bool:
    """True when the store refused a second deck with the same owner and name.

    SQLite reports the columns, other backends the constraint name.
    """
    text = str(exc.orig)
    return NAME_CONSTRAINT in text or ("decks.user_id" in text and "decks.name" in text)


def get_owned_deck(decks: DeckRepository, deck_id: UUID, user_id: UUID) -> Deck:
    """Load a deck and make sure ``user_id`` owns it."""
    deck = decks.get_by_id(deck_id)
    if deck is None:
        raise DeckNotFound()
    authorize(deck.user_id, user_id)
    return deck


class DeckService:
    def __init__(self, decks: DeckRepository, tx: TxRunner):
        self.deck_repo = decks
        self.tx = tx

    def create_deck(self, *, user_id: UUID, name: str, description: str | None) -> Deck:
        try:
            with self.tx.atomic():
                if self.deck_repo.count_for_user(user_id) >= DECK_LIMIT:
                    raise DeckLimitExceeded(f"A user cannot have more than {DECK_LIMIT} decks")
                if self.deck_repo.name_taken(user_id, name):
                    raise DeckConflict()
                deck = self.deck_repo.create(user_id=user_id, name=name, description=description)
        except IntegrityError as exc:
            if not is_name_clash(exc):
                raise
            raise DeckConflict() from exc
        logger.info("Created deck %s for user %s", deck.id, user_id)
        return deck

    def get_decks(self, *, user_id: UUID, page: int, size: int) -> Page[Deck]:
        decks, total = self.deck_repo.list_for_user(user_id, page=page, size=size)
        return Page(items=decks, total=total, page=page, size=size)

    def get_deck(self, *, deck_id: UUID, user_id: UUID) -> Deck:
        return get_owned_deck(self.deck_repo, deck_id, user_id)

    def update_deck(self, *, deck_id: UUID, user_id: UUID, name: str, description: str | None) -> Deck:
        try:
            with self.tx.atomic():
                deck = get_owned_deck(self.deck_repo, deck_id, user_id)
                if self.deck_repo.name_taken(user_id, name, exclude_id=deck_id):
                    raise DeckConflict()
                updated = self.deck_repo.update(dataclasses.replace(deck, name=name, description=description))
        except IntegrityError as exc:
            if not is_name_clash(exc):
                raise
            raise DeckConflict() from exc
        return updated

    def delete_deck(self, *, deck_id: UUID, user_id: UUID) -> None:
        with self.tx.atomic():
            get_owned_deck(self.deck_repo, deck_id, user_id)
            self.deck_repo.delete(deck_id)
        logger.info("Deleted deck %s", deck_id)
