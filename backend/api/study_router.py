"""API routes for due cards and review submission."""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.dependencies import get_current_user_id, parse_deck_ids
from backend.api.schemas import (
    CardResponse,
    ReviewBatchRequest,
    ReviewBatchResponse,
    ReviewResult,
)
from backend.config import settings
from backend.database import get_session
from backend.srs.due import select_due
from backend.srs.errors import ReviewValidationError
from backend.srs.reviews import ReviewEntry, apply_reviews
from backend.srs.unit_of_work import SqlAlchemyUnitOfWork

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/study", tags=["study"])


@router.get("/due", response_model=list[CardResponse])
async def fetch_due_cards(
    deck_ids: str | None = Query(default=None, alias="deckIds"),
    limit: int = Query(default=settings.default_due_limit, ge=1, le=settings.max_due_limit),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> list[CardResponse]:
    """Return the caller's cards that are due for review."""
    cards = await select_due(db, user_id, limit=limit, deck_ids=parse_deck_ids(deck_ids))
    return [CardResponse.model_validate(card) for card in cards]


@router.post("/review", response_model=ReviewBatchResponse)
async def review_cards(
    request: ReviewBatchRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> ReviewBatchResponse:
    """Apply a batch of ratings atomically."""
    if not request.reviews:
        raise ReviewValidationError("reviews array required")

    entries = [ReviewEntry(card_id=item.card_id, rating=item.rating) for item in request.reviews]
    result = await apply_reviews(SqlAlchemyUnitOfWork(db), user_id, entries)

    return ReviewBatchResponse(
        updated=result.updated_count,
        results=[
            ReviewResult(
                card_id=applied.card_id,
                repetition=applied.state.repetition,
                interval=applied.state.interval,
                ease_factor=applied.state.ease_factor,
            )
            for applied in result.applied
        ],
    )
