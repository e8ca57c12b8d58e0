"""Pydantic schemas for API request/response models.

Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from backend.srs.sm2 import Rating


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# --- Cards ---


class ReviewHistoryEntry(CamelModel):
    reviewed_at: datetime
    rating: int
    interval: int
    ease_factor: float


class CardResponse(CamelModel):
    """A card with its scheduling state and full review history."""

    id: int
    deck_id: int
    front: str
    back: str
    repetition: int
    interval: int
    ease_factor: float
    last_reviewed_at: datetime | None
    created_at: datetime
    review_history: list[ReviewHistoryEntry]


# --- Reviews ---


class ReviewItem(CamelModel):
    card_id: int
    rating: Rating  # 0=Again, 1=Hard, 2=Good, 3=Easy


class ReviewBatchRequest(CamelModel):
    """Body of POST /study/review."""

    reviews: list[ReviewItem] | None = None


class ReviewResult(CamelModel):
    card_id: int
    repetition: int
    interval: int
    ease_factor: float


class ReviewBatchResponse(CamelModel):
    updated: int
    results: list[ReviewResult]


# --- Study sessions ---


class SessionStartResponse(CamelModel):
    session_id: str
    total_cards: int


class SessionCardResponse(CamelModel):
    """The card currently at the head of a session queue."""

    id: int
    deck_id: int
    front: str
    back: str
    repetition: int
    interval: int
    ease_factor: float
    remaining: int


class SessionAnswerRequest(CamelModel):
    card_id: int
    rating: Rating


class SessionAnswerResponse(CamelModel):
    card_id: int
    persisted: ReviewResult | None
    remaining: int
    next_card_id: int | None


class SessionStatsResponse(CamelModel):
    studied: int
    again: int
    hard: int
    good: int
    easy: int
    remaining: int
