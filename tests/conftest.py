"""
Shared fixtures.

The environment is set before any application module is imported: settings
are read once and the engine is bound at import time.

Run with:  python -m pytest tests/ -v
"""
import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="flashcards-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/test.db"
os.environ["SECRET_KEY"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["JWT_COOKIE_CSRF_PROTECT"] = "false"
os.environ["APP_ENV"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from core.database import Base, SessionLocal, engine  # noqa: E402
from main import app  # noqa: E402
from models import card, deck, deck_share, refresh_token, user  # noqa: E402,F401

API = "/api/v1"
PASSWORD = "Abcd123!"


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def signup():
    """Register and log in a user; returns ``(client, user_json)``.

    Every user gets their own TestClient so cookie jars never mix.
    """
    clients = []

    def _signup(login: str, email: str | None = None, password: str = PASSWORD):
        c = TestClient(app)
        clients.append(c)
        r = c.post(f"{API}/auth/register", json={
            "email": email or f"{login}@mail.com",
            "login": login,
            "password": password,
        })
        assert r.status_code == 201, r.text
        r = c.post(f"{API}/auth/login", json={"login": login, "password": password})
        assert r.status_code == 200, r.text
        return c, c.get(f"{API}/users/me").json()

    yield _signup
    for c in clients:
        c.close()


@pytest.fixture
def alice(signup):
    return signup("alice", "alice@x.com")


@pytest.fixture
def bob(signup):
    return signup("bob", "bob@mail.com")


def make_deck(c: TestClient, name: str = "Capitals", description: str | None = None) -> dict:
    r = c.post(f"{API}/decks", json={"name": name, "description": description})
    assert r.status_code == 201, r.text
    return r.json()


def make_card(c: TestClient, deck_id: str, question: str = "France?", answer: str = "Paris") -> dict:
    r = c.post(f"{API}/decks/{deck_id}/cards", json={"question": question, "answer": answer})
    assert r.status_code == 201, r.text
    return r.json()
