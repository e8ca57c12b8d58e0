from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.models.base import Base, TimestampMixin


class Course(Base, TimestampMixin):
    """A course owned by a single user; the root of the ownership chain."""

    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    user: Mapped["User"] = relationship(back_populates="courses")  # type: ignore[name-defined] # noqa: F821
    decks: Mapped[list["Deck"]] = relationship(back_populates="course")  # type: ignore[name-defined] # noqa: F821
