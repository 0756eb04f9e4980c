from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from core.config import as_utc
from domain import entities
from models.user import User


def _to_entity(row: User) -> entities.User:
    return entities.User(
        id=row.id,
        email=row.email,
        login=row.login,
        password_hash=row.password_hash,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_email(self, email: str) -> entities.User | None:
        row = self.db.execute(select(User).where(User.email == email)).scalar_one_or_none()
        return _to_entity(row) if row else None

    def get_by_login(self, login: str) -> entities.User | None:
        row = self.db.execute(select(User).where(User.login == login)).scalar_one_or_none()
        return _to_entity(row) if row else None

    def get_by_id(self, user_id: UUID) -> entities.User | None:
        row = self.db.get(User, user_id)
        return _to_entity(row) if row else None

    def email_taken(self, email: str, *, exclude_id: UUID | None = None) -> bool:
        stmt = select(User.id).where(User.email == email)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self.db.execute(stmt.limit(1)).first() is not None

    def login_taken(self, login: str, *, exclude_id: UUID | None = None) -> bool:
        stmt = select(User.id).where(User.login == login)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self.db.execute(stmt.limit(1)).first() is not None

    def create(self, *, email: str, login: str, password_hash: str) -> entities.User:
        user = User(email=email, login=login, password_hash=password_hash)
        self.db.add(user)
        self.db.flush()
        return _to_entity(user)

    def update(self, user: entities.User) -> entities.User | None:
        row = self.db.get(User, user.id)
        if row is None:
            return None
        row.email = user.email
        row.login = user.login
        self.db.flush()
        return _to_entity(row)

    def update_password(self, user_id: UUID, password_hash: str) -> bool:
        row = self.db.get(User, user_id)
        if row is None:
            return False
        row.password_hash = password_hash
        self.db.flush()
        return True

    def delete(self, user_id: UUID) -> None:
        self.db.execute(delete(User).where(User.id == user_id))
