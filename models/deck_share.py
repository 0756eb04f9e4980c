from sqlalchemy import Column, ForeignKey, Uuid

from core.database import Base


class DeckShare(Base):
    """Share token -> deck. A deck may have any number of live tokens."""

    __tablename__ = "deck_shares"

    token = Column(Uuid, primary_key=True)
    deck_id = Column(Uuid, ForeignKey("decks.id", ondelete="CASCADE"), nullable=False, index=True)
