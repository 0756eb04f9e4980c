from uuid import UUID

from domain.errors import Forbidden


def authorize(owner_id: UUID, user_id: UUID) -> None:
    if owner_id != user_id:
        raise Forbidden()
