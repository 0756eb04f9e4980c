"""
Workflow tests against a real session, without HTTP.
"""
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from core.config import as_utc
from core.database import TxRunner
from domain.entities import Page, StudyStatus
from domain.errors import (
    CardLimitExceeded,
    DeckConflict,
    DeckLimitExceeded,
    DeckNotFound,
    EmailConflict,
    Forbidden,
    TokenNotFound,
    UserNotFound,
)
from models.card import Card
from models.deck import Deck
from repositories.card_repo import CardRepository
from repositories.deck_repo import DeckRepository
from repositories.deck_share_repo import DeckShareRepository
from repositories.refresh_token_repo import RefreshTokenRepository
from repositories.user_repo import UserRepository
from services.auth_services import AuthService
from services.card_service import CARD_LIMIT, CardService
from services.deck_service import DECK_LIMIT, DeckService
from services.share_service import ShareService
from services.study_service import StudyService, learned_percent
from services.user_services import UserService


@pytest.fixture
def tx(db):
    return TxRunner(db)


@pytest.fixture
def users(db, tx):
    return AuthService(UserRepository(db), tx)


@pytest.fixture
def decks(db, tx):
    return DeckService(DeckRepository(db), tx)


@pytest.fixture
def cards(db, tx):
    return CardService(CardRepository(db), DeckRepository(db), tx)


@pytest.fixture
def sharing(db, tx, decks):
    return ShareService(decks, DeckShareRepository(db), DeckRepository(db), CardRepository(db), tx)


@pytest.fixture
def alice_id(users):
    return users.register(email="alice@x.com", login="alice", password="Abcd123!").id


@pytest.fixture
def bob_id(users):
    return users.register(email="bob@mail.com", login="bob", password="Abcd123!").id


# ── helpers ──────────────────────────────────────────────────────────────────

class TestLearnedPercent:

    @pytest.mark.parametrize("learned,count,expected", [
        (0, 0, 0),
        (0, 3, 0),
        (1, 3, 33),
        (2, 3, 66),
        (3, 3, 100),
        (1, 1, 100),
    ])
    def test_formula(self, learned, count, expected):
        assert learned_percent(learned, count) == expected

    def test_never_above_hundred(self):
        assert learned_percent(5, 3) == 100


class TestPage:

    def test_total_pages(self):
        assert Page(items=[], total=5, page=0, size=2).total_pages == 3
        assert Page(items=[], total=4, page=0, size=2).total_pages == 2
        assert Page(items=[], total=0, page=0, size=20).total_pages == 0

    def test_non_positive_size(self):
        assert Page(items=[], total=5, page=0, size=0).total_pages == 0


class TestTxRunner:

    def test_nested_blocks_commit_once(self, db, tx):
        with tx.atomic():
            with tx.atomic():
                UserRepository(db).create(email="a@mail.com", login="aaa", password_hash="h")
            assert db.in_transaction()
        assert not db.in_transaction()
        assert UserRepository(db).get_by_login("aaa") is not None

    def test_inner_failure_rolls_back_everything(self, db, tx):
        with pytest.raises(RuntimeError):
            with tx.atomic():
                UserRepository(db).create(email="a@mail.com", login="aaa", password_hash="h")
                with tx.atomic():
                    raise RuntimeError("boom")
        assert UserRepository(db).get_by_login("aaa") is None


# ── workflows ────────────────────────────────────────────────────────────────

class TestUsers:

    def test_register_hashes_password(self, db, alice_id):
        stored = UserRepository(db).get_by_id(alice_id)
        assert stored.password_hash != "Abcd123!"
        assert stored.password_hash.startswith("$argon2")

    def test_register_conflict(self, users, alice_id):
        with pytest.raises(EmailConflict):
            users.register(email="alice@x.com", login="someone", password="Abcd123!")

    def test_lookups(self, db, tx, alice_id):
        svc = UserService(UserRepository(db), tx)
        assert svc.find_by_login("alice").id == alice_id
        assert svc.find_by_id(alice_id).login == "alice"
        assert svc.find_by_login("nobody") is None

    def test_delete_missing_user(self, db, tx):
        with pytest.raises(UserNotFound):
            UserService(UserRepository(db), tx).delete_user(uuid.uuid4())


class TestDecks:

    def test_deck_limit_leaves_state_unchanged(self, db, decks, alice_id):
        for i in range(DECK_LIMIT):
            decks.create_deck(user_id=alice_id, name=f"Deck {i}", description=None)
        with pytest.raises(DeckLimitExceeded):
            decks.create_deck(user_id=alice_id, name="extra", description=None)
        assert db.query(Deck).count() == DECK_LIMIT

    def test_duplicate_name(self, decks, alice_id):
        decks.create_deck(user_id=alice_id, name="Capitals", description=None)
        with pytest.raises(DeckConflict):
            decks.create_deck(user_id=alice_id, name="Capitals", description="again")

    def test_ownership(self, decks, alice_id, bob_id):
        deck = decks.create_deck(user_id=alice_id, name="Capitals", description=None)
        with pytest.raises(Forbidden):
            decks.delete_deck(deck_id=deck.id, user_id=bob_id)
        assert decks.get_deck(deck_id=deck.id, user_id=alice_id).name == "Capitals"


class TestCards:

    def test_card_limit(self, db, decks, cards, alice_id):
        deck = decks.create_deck(user_id=alice_id, name="Capitals", description=None)
        for i in range(CARD_LIMIT):
            cards.create_card(deck_id=deck.id, user_id=alice_id, question=f"Q{i}", answer=f"A{i}")
        with pytest.raises(CardLimitExceeded):
            cards.create_card(deck_id=deck.id, user_id=alice_id, question="Q", answer="A")
        assert decks.get_deck(deck_id=deck.id, user_id=alice_id).cards_count == CARD_LIMIT
        assert db.query(Card).count() == CARD_LIMIT

    def test_count_matches_rows(self, db, decks, cards, alice_id):
        deck = decks.create_deck(user_id=alice_id, name="Capitals", description=None)
        made = [cards.create_card(deck_id=deck.id, user_id=alice_id, question=f"Q{i}", answer="A") for i in range(4)]
        cards.delete_card(deck_id=deck.id, card_id=made[1].id, user_id=alice_id)
        cards.delete_card(deck_id=deck.id, card_id=made[2].id, user_id=alice_id)
        page = cards.get_cards(deck_id=deck.id, user_id=alice_id, page=0, size=10)
        assert page.total == 2
        assert decks.get_deck(deck_id=deck.id, user_id=alice_id).cards_count == 2


class TestStudy:

    def test_answer_sets_percent_and_last_studied(self, db, tx, decks, cards, alice_id):
        deck = decks.create_deck(user_id=alice_id, name="Capitals", description=None)
        card = cards.create_card(deck_id=deck.id, user_id=alice_id, question="France?", answer="Paris")
        study = StudyService(CardRepository(db), DeckRepository(db), tx)

        assert study.process_study_answer(
            deck_id=deck.id, user_id=alice_id, card_id=card.id, status=StudyStatus.REMEMBERED
        ) == 100
        assert study.process_study_answer(
            deck_id=deck.id, user_id=alice_id, card_id=card.id, status=StudyStatus.FORGOTTEN
        ) == 0

        stored = decks.get_deck(deck_id=deck.id, user_id=alice_id)
        assert stored.learned_percent == 0
        assert stored.last_studied is not None


class _DanglingShares:
    """Share table stand-in whose token points at a deck that no longer exists."""

    def __init__(self, token):
        self.token = token

    def find_deck_id(self, token):
        return uuid.uuid4() if token == self.token else None


class TestSharing:

    def test_unknown_token(self, sharing):
        with pytest.raises(TokenNotFound):
            sharing.get_shared_deck(uuid.uuid4())

    def test_dangling_token(self, db, tx, decks):
        token = uuid.uuid4()
        svc = ShareService(decks, _DanglingShares(token), DeckRepository(db), CardRepository(db), tx)
        with pytest.raises(DeckNotFound):
            svc.get_shared_deck(token)

    def test_custom_url_prefix(self, db, tx, decks, alice_id):
        deck = decks.create_deck(user_id=alice_id, name="Capitals", description=None)
        svc = ShareService(
            decks, DeckShareRepository(db), DeckRepository(db), CardRepository(db), tx,
            url_prefix="https://cards.example/s/",
        )
        link = svc.generate_share_token(deck_id=deck.id, user_id=alice_id)
        assert link.url == f"https://cards.example/s/{link.token}"

    def test_failed_import_leaves_no_deck(self, db, decks, cards, sharing, alice_id, bob_id):
        source = decks.create_deck(user_id=alice_id, name="Capitals", description=None)
        cards.create_card(deck_id=source.id, user_id=alice_id, question="France?", answer="Paris")
        decks.create_deck(user_id=bob_id, name="Capitals", description=None)
        link = sharing.generate_share_token(deck_id=source.id, user_id=alice_id)

        with pytest.raises(DeckConflict):
            sharing.import_shared_deck(token=link.token, user_id=bob_id)
        assert db.query(Deck).count() == 2
        assert db.query(Card).count() == 1

    def test_import_copies_unlearned(self, db, tx, decks, cards, sharing, alice_id, bob_id):
        source = decks.create_deck(user_id=alice_id, name="Capitals", description="d")
        card = cards.create_card(deck_id=source.id, user_id=alice_id, question="France?", answer="Paris")
        StudyService(CardRepository(db), DeckRepository(db), tx).process_study_answer(
            deck_id=source.id, user_id=alice_id, card_id=card.id, status=StudyStatus.REMEMBERED
        )
        link = sharing.generate_share_token(deck_id=source.id, user_id=alice_id)

        imported = sharing.import_shared_deck(token=link.token, user_id=bob_id, new_name="Mine")
        assert imported.user_id == bob_id
        assert imported.cards_count == 1
        assert imported.learned_percent == 0
        copies = cards.get_all_cards(deck_id=imported.id, user_id=bob_id)
        assert [c.is_learned for c in copies] == [False]
        assert copies[0].id != card.id
        assert cards.get_all_cards(deck_id=source.id, user_id=alice_id)[0].is_learned is True

    def test_revoke_requires_ownership(self, decks, sharing, alice_id, bob_id):
        deck = decks.create_deck(user_id=alice_id, name="Capitals", description=None)
        link = sharing.generate_share_token(deck_id=deck.id, user_id=alice_id)
        with pytest.raises(Forbidden):
            sharing.revoke_share_token(token=link.token, user_id=bob_id)
        sharing.revoke_share_token(token=link.token, user_id=alice_id)
        with pytest.raises(TokenNotFound):
            sharing.get_shared_deck(link.token)


class TestDeckNameConstraint:
    """The unique key on (owner, name) backs the service check when two writers race."""

    @pytest.fixture
    def racing(self, decks, monkeypatch):
        # the other writer commits between our check and our insert
        monkeypatch.setattr(decks.deck_repo, "name_taken", lambda *args, **kwargs: False)
        return decks

    def test_create(self, db, decks, racing, alice_id):
        decks.create_deck(user_id=alice_id, name="Capitals", description=None)
        with pytest.raises(DeckConflict):
            racing.create_deck(user_id=alice_id, name="Capitals", description="again")
        assert db.query(Deck).count() == 1
        assert db.query(Deck).one().description is None

    def test_rename(self, db, decks, racing, alice_id):
        decks.create_deck(user_id=alice_id, name="Capitals", description=None)
        rivers = decks.create_deck(user_id=alice_id, name="Rivers", description=None)
        with pytest.raises(DeckConflict):
            racing.update_deck(deck_id=rivers.id, user_id=alice_id, name="Capitals", description=None)
        assert sorted(d.name for d in db.query(Deck)) == ["Capitals", "Rivers"]

    def test_import_inside_outer_transaction(self, db, decks, racing, cards, sharing, alice_id, bob_id):
        source = decks.create_deck(user_id=alice_id, name="Capitals", description=None)
        cards.create_card(deck_id=source.id, user_id=alice_id, question="France?", answer="Paris")
        decks.create_deck(user_id=bob_id, name="Capitals", description=None)
        link = sharing.generate_share_token(deck_id=source.id, user_id=alice_id)

        with pytest.raises(DeckConflict):
            sharing.import_shared_deck(token=link.token, user_id=bob_id)
        assert db.query(Deck).count() == 2
        assert db.query(Card).count() == 1

    def test_other_integrity_errors_are_not_conflicts(self, db, decks):
        # no such owner: the foreign key refuses the row
        with pytest.raises(IntegrityError):
            decks.create_deck(user_id=uuid.uuid4(), name="Ghost", description=None)
        assert db.query(Deck).count() == 0


class TestRefreshTokens:

    @pytest.fixture
    def tokens(self, db):
        return RefreshTokenRepository(db)

    def _record(self, tx, tokens, user_id, jti, expires_in):
        with tx.atomic():
            tokens.record(user_id=user_id, jti=jti, expires_at=datetime.now(timezone.utc) + expires_in)

    def test_live_token(self, tx, tokens, alice_id):
        self._record(tx, tokens, alice_id, "jti-1", timedelta(days=1))
        assert tokens.is_active("jti-1")
        tokens.check_owner(jti="jti-1", user_id=alice_id)

    def test_unknown_and_foreign(self, tx, tokens, alice_id, bob_id):
        self._record(tx, tokens, alice_id, "jti-1", timedelta(days=1))
        assert not tokens.is_active("nope")
        with pytest.raises(PermissionError):
            tokens.check_owner(jti="jti-1", user_id=bob_id)

    def test_revoke(self, tx, tokens, alice_id):
        self._record(tx, tokens, alice_id, "jti-1", timedelta(days=1))
        with tx.atomic():
            assert tokens.revoke("jti-1")
        assert not tokens.is_active("jti-1")
        with pytest.raises(PermissionError):
            tokens.check_owner(jti="jti-1", user_id=alice_id)
        with tx.atomic():
            assert not tokens.revoke("jti-1")

    def test_expired(self, tx, tokens, alice_id):
        self._record(tx, tokens, alice_id, "jti-1", timedelta(seconds=-1))
        with pytest.raises(PermissionError):
            tokens.check_owner(jti="jti-1", user_id=alice_id)
        with tx.atomic():
            assert not tokens.is_active("jti-1")
        with tx.atomic():
            assert not tokens.revoke("jti-1")

    def test_drop_all_for_user(self, tx, tokens, alice_id, bob_id):
        self._record(tx, tokens, alice_id, "a-1", timedelta(days=1))
        self._record(tx, tokens, alice_id, "a-2", timedelta(days=1))
        self._record(tx, tokens, bob_id, "b-1", timedelta(days=1))
        with tx.atomic():
            tokens.drop_all_for_user(alice_id)
        assert not tokens.is_active("a-1")
        assert not tokens.is_active("a-2")
        assert tokens.is_active("b-1")


class TestTimestamps:

    def test_as_utc(self):
        naive = datetime(2024, 5, 1, 12, 0)
        assert as_utc(naive) == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        aware = datetime(2024, 5, 1, 12, 0, tzinfo=timezone(timedelta(hours=3)))
        assert as_utc(aware) is aware
        assert as_utc(None) is None

    def test_entities_carry_utc(self, db, decks, cards, alice_id):
        deck = decks.create_deck(user_id=alice_id, name="Capitals", description=None)
        cards.create_card(deck_id=deck.id, user_id=alice_id, question="France?", answer="Paris")
        db.expire_all()
        reloaded = decks.get_deck(deck_id=deck.id, user_id=alice_id)
        assert reloaded.created_at.tzinfo is not None
        assert reloaded.created_at.utcoffset() == timedelta(0)
        assert cards.get_all_cards(deck_id=deck.id, user_id=alice_id)[0].created_at.tzinfo is not None
        assert UserRepository(db).get_by_id(alice_id).created_at.tzinfo is not None
