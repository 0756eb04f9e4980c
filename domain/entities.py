"""Plain value objects handed out by the repositories.

ORM rows never leave ``repositories/``; services and routers only see these.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Generic, TypeVar
from uuid import UUID

T = TypeVar("T")


@dataclass(frozen=True)
class User:
    id: UUID
    email: str
    login: str
    password_hash: str
    created_at: datetime
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Deck:
    id: UUID
    user_id: UUID
    name: str
    description: str | None
    cards_count: int
    learned_percent: int
    last_studied: datetime | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Card:
    id: UUID
    deck_id: UUID
    question: str
    answer: str
    is_learned: bool
    created_at: datetime
    updated_at: datetime


class StudyStatus(str, Enum):
    REMEMBERED = "remembered"
    FORGOTTEN = "forgotten"


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    total: int = 0
    page: int = 0
    size: int = 0

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return math.ceil(self.total / self.size)


@dataclass(frozen=True)
class ShareLink:
    token: UUID
    url: str


@dataclass(frozen=True)
class SharedDeckPreview:
    name: str
    description: str | None
    card_count: int
