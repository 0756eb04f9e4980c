from datetime import datetime
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, constr, field_validator

from domain.entities import Page

T = TypeVar("T")

CARD_TEXT_PATTERN = r"^[A-Za-zА-Яа-яЁё0-9\s~`!@#$%^&*()_\-+={\[}\]|\\:;\"'<,>.?/]*$"


def _blank_to_none(value: str | None):
    if value is None:
        return None
    if isinstance(value, str):
        trimmed = value.strip()
        return trimmed or None
    return value


class DeckCreateIn(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=90)
    description: constr(strip_whitespace=True, max_length=200) | None = None

    @field_validator("description", mode="before")
    @classmethod
    def _empty_description_to_none(cls, value: str | None):
        return _blank_to_none(value)


class DeckUpdateIn(DeckCreateIn):
    pass


class DeckOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None = None
    cards_count: int
    learned_percent: int
    last_studied: datetime | None = None
    created_at: datetime
    updated_at: datetime


class CardCreateIn(BaseModel):
    question: constr(strip_whitespace=True, min_length=1, max_length=200, pattern=CARD_TEXT_PATTERN)
    answer: constr(strip_whitespace=True, min_length=1, max_length=200, pattern=CARD_TEXT_PATTERN)


class CardUpdateIn(CardCreateIn):
    pass


class CardOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    deck_id: UUID
    question: str
    answer: str
    is_learned: bool


class PageOut(BaseModel, Generic[T]):
    content: list[T]
    total_elements: int
    total_pages: int
    page: int
    size: int


def page_out(page: Page, item_model: type[BaseModel]) -> PageOut:
    return PageOut[item_model](
        content=[item_model.model_validate(item, from_attributes=True) for item in page.items],
        total_elements=page.total,
        total_pages=page.total_pages,
        page=page.page,
        size=page.size,
    )
