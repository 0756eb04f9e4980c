import sqlite3
from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from core.config import settings


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        # sessions are handed to FastAPI's threadpool
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    future=True,
    connect_args=_connect_args(settings.DATABASE_URL),
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
Base = declarative_base()


@event.listens_for(Engine, "connect")
def _set_sqlite_pragmas(dbapi_connection, _connection_record):
    """Turn on FK enforcement so ON DELETE CASCADE holds under SQLite."""
    if not isinstance(dbapi_connection, sqlite3.Connection):
        return
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON;")
    finally:
        cursor.close()


# dependency
def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


class TxRunner:
    """Commit-or-rollback scope around a single Session.

    Nested ``atomic()`` blocks join the outermost one, so a workflow that
    calls another workflow still commits exactly once.
    """

    def __init__(self, db: Session):
        self.db = db
        self._depth = 0

    @contextmanager
    def atomic(self) -> Iterator[Session]:
        outermost = self._depth == 0
        self._depth += 1
        try:
            yield self.db
            if outermost:
                self.db.commit()
        except Exception:
            if outermost:
                self.db.rollback()
            raise
        finally:
            self._depth -= 1
