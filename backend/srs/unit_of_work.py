"""Transaction handle consumed by the review transaction processor.

The processor only needs point reads along the ownership chain, a way to
stage new rows, and commit/rollback. ``SqlAlchemyUnitOfWork`` provides that
over an ``AsyncSession``; anything else with the same surface works too.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from backend.models.card import Card
from backend.models.course import Course
from backend.models.deck import Deck
from backend.srs.errors import ConcurrentReviewError

logger = logging.getLogger(__name__)


class UnitOfWork(Protocol):
    """Capability surface of a transactional store."""

    async def get_card(self, card_id: int) -> Card | None: ...

    async def get_deck(self, deck_id: int) -> Deck | None: ...

    async def get_course(self, course_id: int) -> Course | None: ...

    def add(self, obj: Any) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


@contextmanager
def _version_conflicts() -> Iterator[None]:
    try:
        yield
    except StaleDataError as exc:
        logger.warning("Card write lost a version race: %s", exc)
        raise ConcurrentReviewError(
            "A card in this batch was reviewed concurrently; retry the batch"
        ) from exc


class SqlAlchemyUnitOfWork:
    """UnitOfWork backed by a SQLAlchemy async session.

    Card rows carry a ``version_id_col``, so flushing a card that another
    transaction changed since it was loaded fails with
    ``ConcurrentReviewError`` instead of silently losing that review. Reads
    can autoflush earlier writes of the same batch, so they are guarded too.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_card(self, card_id: int) -> Card | None:
        with _version_conflicts():
            return await self.session.get(Card, card_id)

    async def get_deck(self, deck_id: int) -> Deck | None:
        with _version_conflicts():
            return await self.session.get(Deck, deck_id)

    async def get_course(self, course_id: int) -> Course | None:
        with _version_conflicts():
            return await self.session.get(Course, course_id)

    def add(self, obj: Any) -> None:
        self.session.add(obj)

    async def commit(self) -> None:
        with _version_conflicts():
            await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
