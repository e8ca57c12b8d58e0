"""Study session orchestrator.

Seeds a StudyQueue from the due-card selector and, for every answer, feeds
the same rating to both the review transaction processor (persisted
schedule) and the queue (in-session order).
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Collection
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from backend.models.card import Card
from backend.srs.due import select_due
from backend.srs.queue import StudyQueue
from backend.srs.reviews import ReviewEntry, apply_reviews
from backend.srs.sm2 import Rating, ReviewState
from backend.srs.unit_of_work import SqlAlchemyUnitOfWork

logger = logging.getLogger(__name__)


class CardMismatchError(Exception):
    """The answered card is not the one at the head of the queue."""


@dataclass
class SessionStats:
    """Per-rating counters for one study session."""

    studied: int = 0
    again: int = 0
    hard: int = 0
    good: int = 0
    easy: int = 0

    def record(self, rating: Rating) -> None:
        self.studied += 1
        name = rating.name.lower()
        setattr(self, name, getattr(self, name) + 1)


@dataclass
class StudySession:
    """An active study session for one user."""

    user_id: int
    queue: StudyQueue[Card]
    stats: SessionStats = field(default_factory=SessionStats)
    _answer_lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    @property
    def remaining(self) -> int:
        return len(self.queue)

    @property
    def is_complete(self) -> bool:
        return self.queue.is_complete

    @property
    def current_card(self) -> Card | None:
        return self.queue.current()

    async def answer(self, db: AsyncSession, card_id: int, rating: Rating) -> ReviewState | None:
        """Persist a rating for the head card, then requeue it.

        Returns:
            The card's new persisted state, or None if the card no longer
            exists (it is still requeued so the session keeps its shape).

        Raises:
            CardMismatchError: ``card_id`` is not the current card, including
                when an overlapping answer for the same card got there first.
            SchedulingError: The review batch was rejected; the queue is unchanged.
        """
        # Held from the head check until the queue has advanced
        async with self._answer_lock:
            card = self.current_card
            if card is None or card.id != card_id:
                raise CardMismatchError(f"Card {card_id} is not the current card")

            result = await apply_reviews(
                SqlAlchemyUnitOfWork(db),
                self.user_id,
                [ReviewEntry(card_id=card_id, rating=rating)],
            )

            state = None
            if result.applied:
                state = result.applied[0].state
                # Keep the queued snapshot in step with what was persisted
                card.repetition = state.repetition
                card.interval = state.interval
                card.ease_factor = state.ease_factor

            self.queue.advance(rating)
            self.stats.record(rating)
            return state

    def end(self) -> SessionStats:
        """Discard the remaining queue and return the final counters."""
        self.queue.clear()
        logger.info(
            "Ended study session for user %d after %d answers", self.user_id, self.stats.studied
        )
        return self.stats


async def start_session(
    db: AsyncSession,
    user_id: int,
    limit: int,
    deck_ids: Collection[int] | None = None,
    rng: random.Random | None = None,
) -> StudySession:
    """Start a study session over the user's currently due cards.

    Args:
        db: Database session.
        user_id: The user starting the session.
        limit: Maximum number of due cards to seed the queue with.
        deck_ids: Optional deck filter.
        rng: Random source for the queue (seed it for reproducible sessions).

    Returns:
        A StudySession ready for use.
    """
    cards = await select_due(db, user_id, limit=limit, deck_ids=deck_ids)
    session = StudySession(user_id=user_id, queue=StudyQueue(cards, rng=rng))

    logger.info("Started study session for user %d: %d cards queued", user_id, len(cards))
    return session
