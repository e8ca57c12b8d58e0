"""Review transaction processor.

Applies a batch of ratings to cards as one unit of work. Each entry folds to
one of three outcomes:

- ``Applied``: the card was rescheduled and a history entry appended.
- ``SkippedNotFound``: the card id does not exist; the entry is ignored.
- ``Fatal``: the ownership chain is broken or belongs to someone else.

A single ``Fatal`` aborts the batch and rolls back every write made so far,
including those of earlier, valid entries. Nothing is committed until every
entry has been folded.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from backend.config import settings, utcnow
from backend.models.card import Card
from backend.models.review_log import ReviewLog
from backend.srs.errors import (
    OwnershipError,
    ReferentialIntegrityError,
    ReviewValidationError,
    SchedulingError,
)
from backend.srs.sm2 import Rating, ReviewState, clamp_state, next_review_at, update
from backend.srs.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewEntry:
    """One rating submitted for one card."""

    card_id: int
    rating: Rating


@dataclass(frozen=True)
class Applied:
    card_id: int
    state: ReviewState


@dataclass(frozen=True)
class SkippedNotFound:
    card_id: int


@dataclass(frozen=True)
class Fatal:
    card_id: int
    error: SchedulingError


EntryOutcome = Applied | SkippedNotFound | Fatal


@dataclass
class BatchResult:
    """Summary of a committed review batch."""

    applied: list[Applied] = field(default_factory=list)
    skipped: list[SkippedNotFound] = field(default_factory=list)

    @property
    def updated_count(self) -> int:
        return len(self.applied)


def validate_batch(entries: Sequence[ReviewEntry], max_size: int | None = None) -> None:
    """Reject empty or oversized batches before any card is touched."""
    if not entries:
        raise ReviewValidationError("reviews array required")
    max_size = max_size if max_size is not None else settings.max_reviews_per_batch
    if len(entries) > max_size:
        raise ReviewValidationError(
            f"A review batch may contain at most {max_size} entries, got {len(entries)}"
        )


def _apply_to_card(card: Card, rating: Rating, now: datetime) -> ReviewState:
    """Reschedule a loaded card in place and return its new state."""
    current = ReviewState(
        repetition=card.repetition,
        interval=card.interval,
        ease_factor=card.ease_factor,
    )
    reviewed = clamp_state(update(current, rating))

    card.repetition = reviewed.repetition
    card.interval = reviewed.interval
    card.ease_factor = reviewed.ease_factor
    card.last_reviewed_at = now
    card.due_at = next_review_at(now, reviewed.interval)
    return reviewed


async def _fold_entry(
    uow: UnitOfWork,
    owner_id: int,
    entry: ReviewEntry,
    now: datetime,
) -> EntryOutcome:
    card = await uow.get_card(entry.card_id)
    if card is None:
        return SkippedNotFound(card_id=entry.card_id)

    deck = await uow.get_deck(card.deck_id)
    if deck is None:
        return Fatal(
            card_id=entry.card_id,
            error=ReferentialIntegrityError(f"Deck {card.deck_id} not found for card {card.id}"),
        )

    course = await uow.get_course(deck.course_id) if deck.course_id is not None else None
    if course is None:
        return Fatal(
            card_id=entry.card_id,
            error=ReferentialIntegrityError(f"Course not found for deck {deck.id}"),
        )

    if course.user_id != owner_id:
        return Fatal(
            card_id=entry.card_id,
            error=OwnershipError(f"Card {card.id} does not belong to the caller"),
        )

    state = _apply_to_card(card, entry.rating, now)
    uow.add(
        ReviewLog(
            card_id=card.id,
            reviewed_at=now,
            rating=int(entry.rating),
            interval=state.interval,
            ease_factor=state.ease_factor,
        )
    )
    return Applied(card_id=card.id, state=state)


async def apply_reviews(
    uow: UnitOfWork,
    owner_id: int,
    entries: Sequence[ReviewEntry],
    now: datetime | None = None,
) -> BatchResult:
    """Apply a batch of reviews for ``owner_id`` atomically.

    Args:
        uow: Transaction handle over the card store.
        owner_id: The verified caller; every card must sit in one of their courses.
        entries: Ratings to apply, processed in order.
        now: Review timestamp (defaults to utcnow).

    Returns:
        The committed BatchResult.

    Raises:
        ReviewValidationError: The batch is empty or too large.
        ReferentialIntegrityError: A card's deck or course is missing.
        OwnershipError: A card belongs to another user's course.
        ConcurrentReviewError: A card changed underneath this batch.
    """
    validate_batch(entries)
    now = now or utcnow()
    result = BatchResult()

    try:
        for entry in entries:
            outcome = await _fold_entry(uow, owner_id, entry, now)
            if isinstance(outcome, Fatal):
                raise outcome.error
            if isinstance(outcome, SkippedNotFound):
                logger.warning("Skipping review for unknown card %s", outcome.card_id)
                result.skipped.append(outcome)
            else:
                result.applied.append(outcome)
        await uow.commit()
    except SchedulingError as exc:
        await uow.rollback()
        logger.warning(
            "Rolled back review batch of %d for user %d: %s", len(entries), owner_id, exc
        )
        raise
    except Exception:
        await uow.rollback()
        raise

    logger.info(
        "Committed review batch for user %d: %d updated, %d skipped",
        owner_id,
        result.updated_count,
        len(result.skipped),
    )
    return result
