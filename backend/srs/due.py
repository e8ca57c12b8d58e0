"""Due-card selection.

A card is due when it has never been reviewed, or when its stored
``due_at`` (``last_reviewed_at + interval`` days) is at or before now.
Results are scoped through the deck -> course -> user ownership chain and
ordered by next-review instant (never-reviewed first), then creation time,
then id, so paging is reproducible.
"""

import logging
from collections.abc import Collection
from datetime import datetime

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backend.config import utcnow
from backend.models.card import Card
from backend.models.course import Course
from backend.models.deck import Deck
from backend.srs.sm2 import next_review_at

logger = logging.getLogger(__name__)


def is_due(card: Card, now: datetime) -> bool:
    """Return True if ``card`` should be reviewed at ``now``."""
    if card.last_reviewed_at is None:
        return True
    return now >= next_review_at(card.last_reviewed_at, card.interval)


async def select_due(
    session: AsyncSession,
    owner_id: int,
    limit: int,
    deck_ids: Collection[int] | None = None,
    now: datetime | None = None,
) -> list[Card]:
    """Return the cards ``owner_id`` should review now.

    Args:
        session: Database session (read-only use).
        owner_id: The user whose courses scope the result.
        limit: Maximum number of cards to return.
        deck_ids: Optional deck filter; None means every deck the user owns.
        now: Current time (defaults to utcnow).

    Returns:
        Due cards with their review history loaded, in review order.
    """
    now = now or utcnow()

    filters = [
        Course.user_id == owner_id,
        or_(Card.last_reviewed_at.is_(None), Card.due_at <= now),
    ]
    if deck_ids is not None:
        filters.append(Card.deck_id.in_(list(deck_ids)))

    stmt = (
        select(Card)
        .join(Deck, Card.deck_id == Deck.id)
        .join(Course, Deck.course_id == Course.id)
        .where(and_(*filters))
        # False sorts before True, so never-reviewed cards come first
        .order_by(Card.due_at.is_not(None), Card.due_at.asc(), Card.created_at.asc(), Card.id.asc())
        .limit(limit)
        .options(selectinload(Card.review_history))
    )
    result = await session.execute(stmt)
    cards = list(result.scalars().all())

    logger.info(
        "Selected %d due cards for user %d (decks=%s, limit=%d)",
        len(cards),
        owner_id,
        sorted(deck_ids) if deck_ids is not None else "all",
        limit,
    )
    return cards
