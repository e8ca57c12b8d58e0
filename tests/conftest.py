"""Shared fixtures: a fresh SQLite database per test and an API client bound to it."""

import os
import tempfile
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

# Point the module-level engine at a scratch database before backend is imported.
os.environ.setdefault(
    "STUDECK_DATABASE_URL",
    f"sqlite+aiosqlite:///{Path(tempfile.mkdtemp(prefix='studeck-tests-')) / 'studeck.db'}",
)

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from backend.api import session_router  # noqa: E402
from backend.config import utcnow  # noqa: E402
from backend.database import get_session  # noqa: E402
from backend.main import app  # noqa: E402
from backend.models import Base, Card, Course, Deck, User  # noqa: E402
from backend.srs.sm2 import next_review_at  # noqa: E402


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


async def add_card(
    session: AsyncSession,
    deck_id: int,
    *,
    front: str = "front",
    back: str = "back",
    repetition: int = 0,
    interval: int = 1,
    ease_factor: float = 2.5,
    last_reviewed_at: datetime | None = None,
    created_at: datetime | None = None,
) -> Card:
    """Insert a card, deriving ``due_at`` the way the review processor does."""
    card = Card(
        deck_id=deck_id,
        front=front,
        back=back,
        repetition=repetition,
        interval=interval,
        ease_factor=ease_factor,
        last_reviewed_at=last_reviewed_at,
        due_at=next_review_at(last_reviewed_at, interval) if last_reviewed_at else None,
    )
    if created_at is not None:
        card.created_at = created_at
    session.add(card)
    await session.flush()
    return card


@dataclass
class World:
    """Two users, each owning one course with one deck.

    Alice owns three never-reviewed cards; Bob owns one.
    """

    alice_id: int
    bob_id: int
    alice_deck_id: int
    bob_deck_id: int
    alice_card_ids: list[int]
    bob_card_id: int


@pytest.fixture
async def world(session_factory: async_sessionmaker[AsyncSession]) -> World:
    async with session_factory() as session:
        alice = User(name="Alice", email="alice@example.com")
        bob = User(name="Bob", email="bob@example.com")
        session.add_all([alice, bob])
        await session.flush()

        alice_course = Course(user_id=alice.id, name="Biology")
        bob_course = Course(user_id=bob.id, name="History")
        session.add_all([alice_course, bob_course])
        await session.flush()

        alice_deck = Deck(course_id=alice_course.id, title="Cells")
        bob_deck = Deck(course_id=bob_course.id, title="Empires")
        session.add_all([alice_deck, bob_deck])
        await session.flush()

        created = utcnow()
        alice_cards = [
            await add_card(session, alice_deck.id, front=f"alice-{i}", created_at=created)
            for i in range(3)
        ]
        bob_card = await add_card(session, bob_deck.id, front="bob-0", created_at=created)
        await session.commit()

        return World(
            alice_id=alice.id,
            bob_id=bob.id,
            alice_deck_id=alice_deck.id,
            bob_deck_id=bob_deck.id,
            alice_card_ids=[card.id for card in alice_cards],
            bob_card_id=bob_card.id,
        )


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    session_router._active_sessions.clear()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
    session_router._active_sessions.clear()
