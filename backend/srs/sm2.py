"""SM-2 review-state updater.

A pure function over ``(repetition, interval, ease_factor)`` and a four-level
rating. Again/Hard reset the repetition streak; Good/Easy grow the interval
(1 day, then 6 days, then ``interval * ease_factor``) and adjust the ease
factor with the SM-2 recurrence.

Policy choices:
- Again/Hard leave the ease factor unchanged (apart from the 1.3 floor).
- Ratings map onto the SM-2 quality scale as Again=0, Hard=3, Good=4, Easy=5.
- Interval growth rounds half up (12.5 days -> 13 days).
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import IntEnum

MIN_EASE_FACTOR = 1.3
MIN_INTERVAL_DAYS = 1
FIRST_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 6


class Rating(IntEnum):
    """Learner's self-assessed recall, as sent over the wire (0-3)."""

    AGAIN = 0
    HARD = 1
    GOOD = 2
    EASY = 3

    @classmethod
    def from_button(cls, button: int) -> "Rating":
        """Map a 1-4 answer button onto the 0-3 wire rating."""
        if not 1 <= button <= 4:
            raise ValueError(f"Rating button must be between 1 and 4, got {button}")
        return cls(button - 1)

    @classmethod
    def parse(cls, value: str) -> "Rating":
        """Parse a button number ("1"-"4") or a rating name ("good")."""
        value = value.strip()
        if value.isdigit():
            return cls.from_button(int(value))
        try:
            return cls[value.upper()]
        except KeyError:
            raise ValueError(f"Unknown rating: {value!r}") from None

    @property
    def button(self) -> int:
        """The 1-4 answer button for this rating."""
        return int(self) + 1

    @property
    def is_qualifying(self) -> bool:
        """Good and Easy count toward the repetition streak."""
        return self >= Rating.GOOD


QUALITY = {
    Rating.AGAIN: 0,
    Rating.HARD: 3,
    Rating.GOOD: 4,
    Rating.EASY: 5,
}


@dataclass(frozen=True)
class ReviewState:
    """Scheduling state of a card between reviews."""

    repetition: int
    interval: int
    ease_factor: float


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def clamp_state(state: ReviewState) -> ReviewState:
    """Force a state back inside its invariants before it is persisted."""
    return ReviewState(
        repetition=max(0, state.repetition),
        interval=max(MIN_INTERVAL_DAYS, state.interval),
        ease_factor=max(MIN_EASE_FACTOR, state.ease_factor),
    )


def next_ease_factor(ease_factor: float, rating: Rating) -> float:
    """Apply the SM-2 ease recurrence for a qualifying rating."""
    q = QUALITY[rating]
    updated = ease_factor + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
    return max(MIN_EASE_FACTOR, updated)


def update(state: ReviewState, rating: Rating) -> ReviewState:
    """Return the scheduling state after a review with ``rating``.

    Args:
        state: Current card state.
        rating: The learner's rating for this review.

    Returns:
        The next ReviewState. Never raises for well-formed input; results
        are clamped to ``interval >= 1`` and ``ease_factor >= 1.3``.
    """
    rating = Rating(rating)

    if not rating.is_qualifying:
        return clamp_state(
            ReviewState(repetition=0, interval=FIRST_INTERVAL_DAYS, ease_factor=state.ease_factor)
        )

    if state.repetition == 0:
        interval = FIRST_INTERVAL_DAYS
    elif state.repetition == 1:
        interval = SECOND_INTERVAL_DAYS
    else:
        interval = _round_half_up(state.interval * state.ease_factor)

    return clamp_state(
        ReviewState(
            repetition=state.repetition + 1,
            interval=interval,
            ease_factor=next_ease_factor(state.ease_factor, rating),
        )
    )


def next_review_at(last_reviewed_at: datetime, interval: int) -> datetime:
    """Return the instant a card reviewed at ``last_reviewed_at`` becomes due."""
    return last_reviewed_at + timedelta(days=interval)
