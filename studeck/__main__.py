"""CLI interface for StuDeck.

Usage:
    python -m studeck due --user-id 1               List cards due for review
    python -m studeck due --user-id 1 -d 3 -d 4     Only cards in decks 3 and 4
    python -m studeck review --user-id 1            Start a review session
    python -m studeck review --user-id 1 --seed 7   Reproducible queue order
"""

import argparse
import asyncio
import logging
import random

from sqlalchemy import select

from backend.config import settings, utcnow
from backend.database import async_session, engine
from backend.models import Base
from backend.models.user import User
from backend.srs.due import select_due
from backend.srs.errors import SchedulingError
from backend.srs.session import start_session
from backend.srs.sm2 import Rating, next_review_at

logger = logging.getLogger(__name__)

RATING_PROMPT = "  Rate [1=Again 2=Hard 3=Good 4=Easy, q=quit]: "


async def ensure_db() -> None:
    """Create tables if they don't exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def user_exists(user_id: int) -> bool:
    async with async_session() as db:
        result = await db.execute(select(User.id).where(User.id == user_id))
        return result.scalar_one_or_none() is not None


def read_rating(raw: str) -> Rating | None:
    """Parse a rating typed at the prompt; None if it is not one."""
    try:
        return Rating.parse(raw)
    except ValueError:
        return None


async def cmd_due(args: argparse.Namespace) -> None:
    """List cards that are due for review."""
    await ensure_db()
    now = utcnow()

    async with async_session() as db:
        cards = await select_due(db, args.user_id, limit=args.limit, deck_ids=args.deck_ids, now=now)

    if not cards:
        print("  No cards due for review. You're all caught up!")
        return

    print(f"\n  {len(cards)} cards due\n")
    for card in cards:
        if card.last_reviewed_at is None:
            status = "new"
        else:
            overdue = now - next_review_at(card.last_reviewed_at, card.interval)
            status = f"overdue {overdue.days}d"
        print(f"  #{card.id:<6} deck {card.deck_id:<5} {status:<14} {card.front}")
    print()


async def cmd_review(args: argparse.Namespace) -> None:
    """Run an interactive review session."""
    await ensure_db()
    if not await user_exists(args.user_id):
        print(f"  User {args.user_id} not found.")
        return

    rng = random.Random(args.seed) if args.seed is not None else None

    # The queue is loaded in its own session; each answer writes through a fresh one
    async with async_session() as db:
        session = await start_session(
            db, args.user_id, limit=args.limit, deck_ids=args.deck_ids, rng=rng
        )
    if session.is_complete:
        print("\n  No cards due for review. You're all caught up!")
        return

    print("\n  Review Session")
    print(f"  {session.remaining} cards due\n")

    while (card := session.current_card) is not None:
        print(f"  [{session.stats.studied + 1}] {card.front}")
        reveal = input("  (enter to show answer, q to quit) ").strip().lower()
        if reveal == "q":
            break
        print(f"  -> {card.back}")

        rating = None
        while rating is None:
            raw = input(RATING_PROMPT).strip().lower()
            if raw == "q":
                break
            rating = read_rating(raw)
        if rating is None:
            break

        try:
            async with async_session() as db:
                state = await session.answer(db, card.id, rating)
        except SchedulingError as exc:
            logger.error("Review for card %d was rejected: %s", card.id, exc)
            print(f"  Could not save review: {exc}")
            break

        if state is not None:
            print(f"  Next review in {state.interval} day(s)\n")

    stats = session.end()

    print("\n  Session Complete!")
    print(
        f"  Studied: {stats.studied}  Again: {stats.again}  Hard: {stats.hard}  "
        f"Good: {stats.good}  Easy: {stats.easy}\n"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="studeck",
        description="StuDeck spaced repetition study tool",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for name, help_text in (("due", "List cards due for review"), ("review", "Start a review session")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--user-id", type=int, required=True, help="User whose decks to study")
        sub.add_argument(
            "-d",
            "--deck-id",
            dest="deck_ids",
            type=int,
            action="append",
            default=None,
            help="Restrict to this deck (repeatable)",
        )
        sub.add_argument(
            "--limit", type=int, default=settings.default_due_limit, help="Max cards to load"
        )
        if name == "review":
            sub.add_argument("--seed", type=int, default=None, help="Seed for the queue shuffle")

    return parser


def main() -> None:
    """Entry point for the StuDeck CLI application."""
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if not args.command:
        parser.print_help()
        return

    commands = {
        "due": cmd_due,
        "review": cmd_review,
    }
    asyncio.run(commands[args.command](args))


if __name__ == "__main__":
    main()
