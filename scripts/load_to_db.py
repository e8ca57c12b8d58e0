"""Load users, courses, decks and cards from a JSON fixture.

Usage:
    python -m scripts.load_to_db data/fixtures/demo.json
    python -m scripts.load_to_db data/fixtures/demo.json -v

Fixture shape::

    [
      {
        "name": "Ada", "email": "ada@example.com",
        "courses": [
          {"name": "Biology", "decks": [
            {"title": "Cells", "cards": [{"front": "Mitochondria", "back": "Powerhouse"}]}
          ]}
        ]
      }
    ]
"""

import argparse
import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import select

from backend.database import async_session, engine
from backend.models import Base
from backend.models.card import Card
from backend.models.course import Course
from backend.models.deck import Deck
from backend.models.user import User


@dataclass
class LoadSummary:
    users: int = 0
    courses: int = 0
    decks: int = 0
    cards: int = 0


async def load_fixture(fixture_path: Path) -> LoadSummary:
    """Insert every user in the fixture, skipping users whose email already exists."""
    data = json.loads(fixture_path.read_text(encoding="utf-8"))
    summary = LoadSummary()

    async with async_session() as session:
        for user_entry in data:
            email = user_entry.get("email")
            if email:
                existing = (
                    await session.execute(select(User).where(User.email == email))
                ).scalar_one_or_none()
                if existing:
                    logging.info("Skipping existing user: %s", email)
                    continue

            user = User(name=user_entry["name"], email=email)
            session.add(user)
            await session.flush()
            summary.users += 1

            for course_entry in user_entry.get("courses", []):
                course = Course(
                    user_id=user.id,
                    name=course_entry["name"],
                    description=course_entry.get("description"),
                )
                session.add(course)
                await session.flush()
                summary.courses += 1

                for deck_entry in course_entry.get("decks", []):
                    deck = Deck(
                        course_id=course.id,
                        title=deck_entry["title"],
                        description=deck_entry.get("description"),
                    )
                    session.add(deck)
                    await session.flush()
                    summary.decks += 1

                    for card_entry in deck_entry.get("cards", []):
                        session.add(
                            Card(deck_id=deck.id, front=card_entry["front"], back=card_entry["back"])
                        )
                        summary.cards += 1

        await session.commit()

    logging.info(
        "Loaded %d users, %d courses, %d decks, %d cards",
        summary.users,
        summary.courses,
        summary.decks,
        summary.cards,
    )
    return summary


async def main_async(args: argparse.Namespace) -> LoadSummary:
    # Ensure tables exist
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return await load_fixture(args.fixture)


def main() -> None:
    parser = argparse.ArgumentParser(description="Load a users/courses/decks/cards fixture")
    parser.add_argument("fixture", type=Path, help="Path to the JSON fixture")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    summary = asyncio.run(main_async(args))
    print(f"Created {summary.cards} cards across {summary.decks} decks.")


if __name__ == "__main__":
    main()
