import dataclasses
import logging
import uuid
from uuid import UUID

from core.database import TxRunner
from domain.entities import Deck, ShareLink, SharedDeckPreview
from domain.errors import DeckNotFound, TokenNotFound
from domain.policy import authorize
from repositories.card_repo import CardRepository
from repositories.deck_repo import DeckRepository
from repositories.deck_share_repo import DeckShareRepository
from services.deck_service import DeckService, get_owned_deck

logger = logging.getLogger(__name__)


class ShareService:
    def __init__(
        self,
        deck_service: DeckService,
        shares: DeckShareRepository,
        decks: DeckRepository,
        cards: CardRepository,
        tx: TxRunner,
        *,
        url_prefix: str = "/api/v1/share",
    ):
        self.deck_service = deck_service
        self.share_repo = shares
        self.deck_repo = decks
        self.card_repo = cards
        self.tx = tx
        self.url_prefix = url_prefix.rstrip("/")

    def _resolve(self, token: UUID) -> Deck:
        deck_id = self.share_repo.find_deck_id(token)
        if deck_id is None:
            raise TokenNotFound()
        deck = self.deck_repo.get_by_id(deck_id)
        if deck is None:
            raise DeckNotFound()
        return deck

    def generate_share_token(self, *, deck_id: UUID, user_id: UUID) -> ShareLink:
        with self.tx.atomic():
            get_owned_deck(self.deck_repo, deck_id, user_id)
            token = uuid.uuid4()
            self.share_repo.save_token(token=token, deck_id=deck_id)
        logger.info("Issued share token for deck %s", deck_id)
        return ShareLink(token=token, url=f"{self.url_prefix}/{token}")

    def get_shared_deck(self, token: UUID) -> SharedDeckPreview:
        deck = self._resolve(token)
        return SharedDeckPreview(name=deck.name, description=deck.description, card_count=deck.cards_count)

    def import_shared_deck(
        self,
        *,
        token: UUID,
        user_id: UUID,
        new_name: str | None = None,
        new_description: str | None = None,
    ) -> Deck:
        """Copy a shared deck into a new deck owned by ``user_id``.

        Without ``new_name`` the source deck's name and description are
        reused, so the importer's own name uniqueness and deck limit apply.
        Copies start unlearned; the source deck is left as it was.
        """
        with self.tx.atomic():
            source = self._resolve(token)
            if new_name is not None:
                name, description = new_name, new_description
            else:
                name, description = source.name, source.description

            deck = self.deck_service.create_deck(user_id=user_id, name=name, description=description)
            copied = self.card_repo.copy_all(source_deck_id=source.id, target_deck_id=deck.id)
            deck = self.deck_repo.update(dataclasses.replace(deck, cards_count=copied))
        logger.info("Imported deck %s as %s (%d cards)", source.id, deck.id, copied)
        return deck

    def revoke_share_token(self, *, token: UUID, user_id: UUID) -> None:
        with self.tx.atomic():
            deck = self._resolve(token)
            authorize(deck.user_id, user_id)
            self.share_repo.delete_token(token)
        logger.info("Revoked share token for deck %s", deck.id)
