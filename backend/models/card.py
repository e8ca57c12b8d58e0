"""Flashcard model carrying SM-2 scheduling state."""

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.models.base import Base, TimestampMixin

DEFAULT_REPETITION = 0
DEFAULT_INTERVAL = 1
DEFAULT_EASE_FACTOR = 2.5


class Card(Base, TimestampMixin):
    """A flashcard in a deck with its long-term review schedule.

    ``due_at`` is ``last_reviewed_at + interval`` days and is NULL until the
    card is reviewed for the first time. ``version`` guards concurrent
    review writes (see ``backend.srs.unit_of_work``).
    """

    __tablename__ = "cards"
    __table_args__ = (Index("ix_cards_deck_id_due_at", "deck_id", "due_at"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    deck_id: Mapped[int] = mapped_column(ForeignKey("decks.id"), nullable=False)
    front: Mapped[str] = mapped_column(Text, nullable=False)
    back: Mapped[str] = mapped_column(Text, nullable=False)
    repetition: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_REPETITION)
    interval: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_INTERVAL)
    ease_factor: Mapped[float] = mapped_column(Float, nullable=False, default=DEFAULT_EASE_FACTOR)
    last_reviewed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    due_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    deck: Mapped["Deck"] = relationship(back_populates="cards")  # type: ignore[name-defined] # noqa: F821
    review_history: Mapped[list["ReviewLog"]] = relationship(  # type: ignore[name-defined] # noqa: F821
        back_populates="card", order_by="ReviewLog.id"
    )

    __mapper_args__ = {"version_id_col": version}
