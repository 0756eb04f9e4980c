import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Uuid

from core.config import utcnow
from core.database import Base


class Card(Base):
    __tablename__ = "cards"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    deck_id = Column(Uuid, ForeignKey("decks.id", ondelete="CASCADE"), nullable=False, index=True)
    question = Column(String(200), nullable=False)
    answer = Column(String(200), nullable=False)
    is_learned = Column(Boolean, nullable=False, default=False, server_default="0")
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
