"""
Todo Cards Backend — Card SQLAlchemy Model
============================================

What:  ORM model representing the `cards` table.
Who:   Used by the Repository for card CRUD and by Alembic.

Table Design:
    - activities_no: primary key, generated as "AC-%04d" from the row count
    - marked: completion timestamp; NULL means the card is still open.
      Once set it can never be changed (see CardService.update_card)
    - deleted_at: soft-delete marker; soft-deleted rows keep counting towards
      the next activities number so numbers are never reused
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import ForeignKey, Index, Integer, String, Text, TIMESTAMP, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

ACTIVITIES_NO_FORMAT = "AC-%04d"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Card(Base):
    """
    A to-do card owned by one author.

    Lifecycle:
        1. Created open (marked = NULL) or already marked
        2. Updated any number of times while open
        3. Marked once; afterwards updates are rejected
        4. Soft-deleted by its author (deleted_at set)
    """

    __tablename__ = "cards"

    activities_no: Mapped[str] = mapped_column(
        String(20),
        primary_key=True,
        comment="Sequential card number, e.g. AC-0001",
    )

    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    marked: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
        default=None,
        comment="Completion timestamp; NULL while the card is open",
    )

    marked_status: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        default=None,
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
        default=None,
    )

    __table_args__ = (
        Index("idx_cards_author_id", "author_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Card(activities_no='{self.activities_no}', author_id={self.author_id}, "
            f"marked='{self.marked}')>"
        )
