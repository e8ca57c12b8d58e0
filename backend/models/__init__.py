"""SQLAlchemy ORM models for the StuDeck database."""

from backend.models.base import Base
from backend.models.card import Card
from backend.models.course import Course
from backend.models.deck import Deck
from backend.models.review_log import ReviewLog
from backend.models.user import User

__all__ = ["Base", "Card", "Course", "Deck", "ReviewLog", "User"]
