import dataclasses
import logging
from typing import Union
from uuid import UUID

from pydantic import SecretStr
from sqlalchemy.exc import IntegrityError

from core.database import TxRunner
from core.security import hash_password, verify_password
from domain.entities import User
from domain.errors import EmailConflict, Forbidden, LoginConflict, UserNotFound
from repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, users: UserRepository, tx: TxRunner):
        self.repo = users
        self.tx = tx

    def find_by_id(self, user_id: UUID) -> User | None:
        return self.repo.get_by_id(user_id)

    def find_by_login(self, login: str) -> User | None:
        return self.repo.get_by_login(login)

    def get_user(self, user_id: UUID) -> User:
        user = self.repo.get_by_id(user_id)
        if user is None:
            raise UserNotFound()
        return user

    def update_profile(self, user_id: UUID, *, email: str, login: str) -> User:
        if self.repo.email_taken(email, exclude_id=user_id):
            raise EmailConflict()
        if self.repo.login_taken(login, exclude_id=user_id):
            raise LoginConflict()
        try:
            with self.tx.atomic():
                user = self.repo.get_by_id(user_id)
                if user is None:
                    raise UserNotFound()
                updated = self.repo.update(dataclasses.replace(user, email=email, login=login))
        except IntegrityError as exc:
            if self.repo.email_taken(email, exclude_id=user_id):
                raise EmailConflict() from exc
            raise LoginConflict() from exc
        return updated

    def update_password(
        self,
        user_id: UUID,
        *,
        current_password: Union[str, SecretStr],
        new_password: Union[str, SecretStr],
    ) -> None:
        with self.tx.atomic():
            user = self.repo.get_by_id(user_id)
            if user is None:
                raise UserNotFound()
            if not verify_password(current_password, user.password_hash):
                raise Forbidden("Current password is invalid")
            self.repo.update_password(user_id, hash_password(new_password))
        logger.info("Password changed for user %s", user_id)

    def delete_user(self, user_id: UUID) -> None:
        with self.tx.atomic():
            if self.repo.get_by_id(user_id) is None:
                raise UserNotFound()
            self.repo.delete(user_id)
        logger.info("Deleted user %s", user_id)
