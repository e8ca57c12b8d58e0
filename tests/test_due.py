"""Tests for due-card selection."""

from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import utcnow
from backend.models import Card, Course, Deck
from backend.srs.due import is_due, select_due
from tests.conftest import World, add_card


async def test_never_reviewed_cards_are_due(db: AsyncSession, world: World) -> None:
    cards = await select_due(db, world.alice_id, limit=50)
    assert sorted(card.id for card in cards) == sorted(world.alice_card_ids)


async def test_due_monotonicity(db: AsyncSession, world: World) -> None:
    now = utcnow()
    overdue = await add_card(
        db, world.alice_deck_id, interval=6, repetition=2, last_reviewed_at=now - timedelta(days=7)
    )
    not_yet = await add_card(
        db, world.alice_deck_id, interval=6, repetition=2, last_reviewed_at=now - timedelta(days=5)
    )
    exactly = await add_card(
        db, world.alice_deck_id, interval=6, repetition=2, last_reviewed_at=now - timedelta(days=6)
    )
    await db.commit()

    ids = {card.id for card in await select_due(db, world.alice_id, limit=50, now=now)}
    assert overdue.id in ids
    assert exactly.id in ids
    assert not_yet.id not in ids


async def test_only_owned_cards(db: AsyncSession, world: World) -> None:
    alice = {card.id for card in await select_due(db, world.alice_id, limit=50)}
    bob = {card.id for card in await select_due(db, world.bob_id, limit=50)}
    assert world.bob_card_id not in alice
    assert bob == {world.bob_card_id}


async def test_foreign_deck_filter_returns_nothing(db: AsyncSession, world: World) -> None:
    cards = await select_due(db, world.alice_id, limit=50, deck_ids={world.bob_deck_id})
    assert cards == []


async def test_deck_filter(db: AsyncSession, world: World) -> None:
    other_deck = Deck(course_id=(await db.get(Deck, world.alice_deck_id)).course_id, title="Organs")
    db.add(other_deck)
    await db.flush()
    extra = await add_card(db, other_deck.id)
    await db.commit()

    only_other = await select_due(db, world.alice_id, limit=50, deck_ids={other_deck.id})
    assert [card.id for card in only_other] == [extra.id]

    both = await select_due(db, world.alice_id, limit=50, deck_ids={other_deck.id, world.alice_deck_id})
    assert len(both) == 4


async def test_orphaned_deck_is_never_returned(db: AsyncSession, world: World) -> None:
    orphan = Deck(course_id=None, title="Loose")
    db.add(orphan)
    await db.flush()
    await add_card(db, orphan.id)
    await db.commit()

    cards = await select_due(db, world.alice_id, limit=50)
    assert len(cards) == 3


async def test_ordering(db: AsyncSession, world: World) -> None:
    now = utcnow()
    course = Course(user_id=world.alice_id, name="Chemistry")
    db.add(course)
    await db.flush()
    deck = Deck(course_id=course.id, title="Acids")
    db.add(deck)
    await db.flush()

    base = now - timedelta(days=30)
    very_overdue = await add_card(
        db, deck.id, interval=1, last_reviewed_at=now - timedelta(days=20), created_at=base
    )
    slightly_overdue = await add_card(
        db, deck.id, interval=1, last_reviewed_at=now - timedelta(days=2), created_at=base
    )
    new_late = await add_card(db, deck.id, created_at=base + timedelta(hours=2))
    new_early = await add_card(db, deck.id, created_at=base + timedelta(hours=1))
    await db.commit()

    cards = await select_due(db, world.alice_id, limit=50, deck_ids={deck.id}, now=now)
    assert [card.id for card in cards] == [
        new_early.id,
        new_late.id,
        very_overdue.id,
        slightly_overdue.id,
    ]


async def test_ties_break_on_creation_time(db: AsyncSession, world: World) -> None:
    now = utcnow()
    reviewed = now - timedelta(days=3)
    later = await add_card(
        db, world.alice_deck_id, last_reviewed_at=reviewed, created_at=now - timedelta(days=1)
    )
    earlier = await add_card(
        db, world.alice_deck_id, last_reviewed_at=reviewed, created_at=now - timedelta(days=2)
    )
    await db.commit()

    cards = await select_due(db, world.alice_id, limit=50, now=now)
    reviewed_ids = [card.id for card in cards if card.last_reviewed_at is not None]
    assert reviewed_ids == [earlier.id, later.id]


async def test_limit(db: AsyncSession, world: World) -> None:
    cards = await select_due(db, world.alice_id, limit=2)
    assert len(cards) == 2
    again = await select_due(db, world.alice_id, limit=2)
    assert [c.id for c in again] == [c.id for c in cards]


async def test_nothing_due_returns_empty(db: AsyncSession, world: World) -> None:
    assert await select_due(db, world.alice_id + world.bob_id + 100, limit=10) == []


async def test_history_is_loaded(db: AsyncSession, world: World) -> None:
    cards = await select_due(db, world.alice_id, limit=1)
    assert cards[0].review_history == []


async def test_selection_has_no_side_effects(db: AsyncSession, world: World) -> None:
    await select_due(db, world.alice_id, limit=50)
    await select_due(db, world.alice_id, limit=50)
    card = await db.get(Card, world.alice_card_ids[0])
    assert card.last_reviewed_at is None
    assert card.repetition == 0
    assert card.version == 1


class TestIsDue:
    def test_never_reviewed(self) -> None:
        assert is_due(Card(interval=3, last_reviewed_at=None), utcnow())

    def test_boundaries(self) -> None:
        now = utcnow()
        assert is_due(Card(interval=4, last_reviewed_at=now - timedelta(days=5)), now)
        assert is_due(Card(interval=4, last_reviewed_at=now - timedelta(days=4)), now)
        assert not is_due(Card(interval=4, last_reviewed_at=now - timedelta(days=3)), now)
