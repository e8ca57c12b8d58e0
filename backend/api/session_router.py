"""API routes for in-memory study sessions."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.dependencies import get_current_user_id, parse_deck_ids
from backend.api.schemas import (
    ReviewResult,
    SessionAnswerRequest,
    SessionAnswerResponse,
    SessionCardResponse,
    SessionStartResponse,
    SessionStatsResponse,
)
from backend.config import settings
from backend.database import get_session
from backend.srs.session import CardMismatchError, StudySession, start_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/study/sessions", tags=["sessions"])

# In-memory session store; sessions live until ended or the process exits
_active_sessions: dict[str, StudySession] = {}


def _get_owned_session(session_id: str, user_id: int) -> StudySession:
    study_session = _active_sessions.get(session_id)
    if study_session is None or study_session.user_id != user_id:
        raise HTTPException(status_code=404, detail="Session not found")
    return study_session


def _stats_response(study_session: StudySession) -> SessionStatsResponse:
    s = study_session.stats
    return SessionStatsResponse(
        studied=s.studied,
        again=s.again,
        hard=s.hard,
        good=s.good,
        easy=s.easy,
        remaining=study_session.remaining,
    )


@router.post("", response_model=SessionStartResponse)
async def session_start(
    deck_ids: str | None = Query(default=None, alias="deckIds"),
    limit: int = Query(default=settings.default_due_limit, ge=1, le=settings.max_due_limit),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> SessionStartResponse:
    """Start a study session over the caller's due cards."""
    study_session = await start_session(db, user_id, limit=limit, deck_ids=parse_deck_ids(deck_ids))

    if study_session.is_complete:
        raise HTTPException(status_code=404, detail="No cards due for review")

    session_id = str(uuid.uuid4())
    _active_sessions[session_id] = study_session

    return SessionStartResponse(session_id=session_id, total_cards=study_session.remaining)


@router.get("/{session_id}/current", response_model=SessionCardResponse)
async def session_current(
    session_id: str,
    user_id: int = Depends(get_current_user_id),
) -> SessionCardResponse:
    """Get the card at the head of the session queue."""
    study_session = _get_owned_session(session_id, user_id)

    card = study_session.current_card
    if card is None:
        raise HTTPException(status_code=410, detail="Session is complete")

    return SessionCardResponse(
        id=card.id,
        deck_id=card.deck_id,
        front=card.front,
        back=card.back,
        repetition=card.repetition,
        interval=card.interval,
        ease_factor=card.ease_factor,
        remaining=study_session.remaining,
    )


@router.post("/{session_id}/answer", response_model=SessionAnswerResponse)
async def session_answer(
    session_id: str,
    request: SessionAnswerRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> SessionAnswerResponse:
    """Rate the current card: persist the review, then requeue the card."""
    study_session = _get_owned_session(session_id, user_id)
    if study_session.is_complete:
        raise HTTPException(status_code=410, detail="Session is complete")

    try:
        state = await study_session.answer(db, request.card_id, request.rating)
    except CardMismatchError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    next_card = study_session.current_card
    return SessionAnswerResponse(
        card_id=request.card_id,
        persisted=(
            ReviewResult(
                card_id=request.card_id,
                repetition=state.repetition,
                interval=state.interval,
                ease_factor=state.ease_factor,
            )
            if state is not None
            else None
        ),
        remaining=study_session.remaining,
        next_card_id=next_card.id if next_card is not None else None,
    )


@router.get("/{session_id}/stats", response_model=SessionStatsResponse)
async def session_stats(
    session_id: str,
    user_id: int = Depends(get_current_user_id),
) -> SessionStatsResponse:
    """Get per-rating counters for the session."""
    return _stats_response(_get_owned_session(session_id, user_id))


@router.post("/{session_id}/end", response_model=SessionStatsResponse)
async def session_end(
    session_id: str,
    user_id: int = Depends(get_current_user_id),
) -> SessionStatsResponse:
    """End a session and discard its queue."""
    study_session = _get_owned_session(session_id, user_id)
    _active_sessions.pop(session_id, None)
    study_session.end()
    return _stats_response(study_session)
