import logging
from typing import Union

from pydantic import SecretStr
from sqlalchemy.exc import IntegrityError

from core.database import TxRunner
from core.security import hash_password, verify_password
from domain.entities import User
from domain.errors import EmailConflict, LoginConflict, Unauthorized
from repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, users: UserRepository, tx: TxRunner):
        self.repo = users
        self.tx = tx

    def register(self, *, email: str, login: str, password: Union[str, SecretStr]) -> User:
        if self.repo.email_taken(email):
            raise EmailConflict()
        if self.repo.login_taken(login):
            raise LoginConflict()
        try:
            with self.tx.atomic():
                user = self.repo.create(email=email, login=login, password_hash=hash_password(password))
        except IntegrityError as exc:
            # lost a race against a concurrent registration
            if self.repo.email_taken(email):
                raise EmailConflict() from exc
            raise LoginConflict() from exc
        logger.info("Registered user %s", user.id)
        return user

    def login(self, *, login: str, password: Union[str, SecretStr]) -> User:
        user = self.repo.get_by_login(login)
        if not user or not verify_password(password, user.password_hash):
            logger.warning("Failed login for %r", login)
            raise Unauthorized("Invalid credentials")
        return user
