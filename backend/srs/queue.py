"""In-session requeueing of cards.

The study queue lives only for one sitting. Each answer removes the head
card and puts it back a few places further down, closer for cards the
learner struggled with. This is separate from, and never written back to,
the persisted SM-2 schedule.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable
from typing import Generic, TypeVar

from backend.srs.sm2 import Rating

logger = logging.getLogger(__name__)

T = TypeVar("T")

# (min, max) offsets from the new head of the queue, inclusive
REQUEUE_WINDOWS: dict[Rating, tuple[int, int]] = {
    Rating.AGAIN: (1, 2),
    Rating.HARD: (2, 4),
    Rating.GOOD: (5, 8),
    Rating.EASY: (10, 15),
}


class StudyQueue(Generic[T]):
    """Ordered, in-memory queue of cards for one study session.

    Not thread-safe: ``advance`` must finish before ``current`` is read again.

    Args:
        cards: The due cards to study; shuffled on construction.
        rng: Random source for shuffling and reinsertion offsets. Pass a
            seeded ``random.Random`` for reproducible sessions.
    """

    def __init__(self, cards: Iterable[T], rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        self._items: list[T] = list(cards)
        self._rng.shuffle(self._items)

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> list[T]:
        """A snapshot of the queue, head first."""
        return list(self._items)

    @property
    def is_complete(self) -> bool:
        return not self._items

    def current(self) -> T | None:
        """Return the head card, or None once the session is complete."""
        return self._items[0] if self._items else None

    def advance(self, rating: Rating) -> int:
        """Requeue the head card according to ``rating``.

        The card is removed and reinserted at an offset drawn uniformly from
        the rating's window, measured from the new head and clamped to the
        end of the queue.

        Returns:
            The card's new index.

        Raises:
            IndexError: The queue is empty.
        """
        if not self._items:
            raise IndexError("advance() on an empty study queue")

        low, high = REQUEUE_WINDOWS[Rating(rating)]
        card = self._items.pop(0)
        offset = self._rng.randint(low, high)
        position = min(offset, len(self._items))
        self._items.insert(position, card)

        logger.debug(
            "Requeued card for %s: drew offset %d, placed at %d of %d",
            Rating(rating).name,
            offset,
            position,
            len(self._items),
        )
        return position

    def clear(self) -> None:
        """Drop every remaining card, ending the session."""
        self._items.clear()
