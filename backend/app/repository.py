"""
Todo Cards Backend — Repository (SQL Layer)
=============================================

What:  Builds and executes every SQL statement the services need.
How:   SQLAlchemy Core statements over the ORM models. Pagination is applied
       by hand (LIMIT/OFFSET) and totals come from a COUNT(*) over the same
       filtered statement.
Who:   Created by services, either bound to a transaction
       (`run_in_transaction`, for_update=True) or to a plain session for reads.

Locking:
    When `for_update` is set, every row-returning SELECT is emitted with
    FOR UPDATE so rows read inside a write transaction stay locked until
    commit. COUNT(*) queries are never locked.

Card numbers:
    The next activities number is "AC-%04d" % (rows in cards + 1). Two
    concurrent inserts can compute the same number; the primary key rejects
    the second one and the card service retries with a fresh count.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import Select, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.card import ACTIVITIES_NO_FORMAT, Card
from app.models.user import User, UserSession

logger = logging.getLogger(__name__)


class Repository:
    """Data access for users, sessions and cards."""

    def __init__(self, session: AsyncSession, for_update: bool = False):
        self.session = session
        self.for_update = for_update

    # ── Common query helpers ──────────────────────────────────────────────

    def select_query(self, stmt: Select) -> Select:
        """Adds FOR UPDATE when this repository runs inside a write transaction."""
        if self.for_update:
            stmt = stmt.with_for_update()
        return stmt

    @staticmethod
    def normalize_pagination(page: int, size: int) -> Tuple[int, int]:
        """A non-positive page becomes 1; a non-positive size becomes the default."""
        if page <= 0:
            page = 1
        if size <= 0:
            size = settings.default_page_size
        return page, size

    @staticmethod
    def pagination_query(stmt: Select, page: int, size: int) -> Select:
        """
        Applies LIMIT/OFFSET for a 1-based page.

        LIMIT is only emitted for a positive size, OFFSET only when non-zero.
        """
        limit = size
        offset = (page - 1) * size

        if limit > 0:
            stmt = stmt.limit(limit)
        if offset > 0:
            stmt = stmt.offset(offset)
        return stmt

    async def count(self, stmt: Select) -> int:
        """Returns COUNT(*) over the rows `stmt` would select (ordering dropped)."""
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        result = await self.session.execute(count_stmt)
        return result.scalar() or 0

    # ── Users ─────────────────────────────────────────────────────────────

    async def check_user(self, email: str) -> Optional[User]:
        stmt = self.select_query(select(User).where(User.email == email).limit(1))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_user(self, name: str, email: str, password_hash: str) -> User:
        user = User(name=name, email=email, password_hash=password_hash)
        self.session.add(user)
        await self.session.flush()  # assigns user.id
        return user

    # ── Sessions ──────────────────────────────────────────────────────────

    async def create_session(self, token: str, user_id: int, expires_at: datetime) -> UserSession:
        user_session = UserSession(token=token, user_id=user_id, expires_at=expires_at)
        self.session.add(user_session)
        await self.session.flush()
        return user_session

    async def get_session(self, token: str) -> Optional[UserSession]:
        stmt = select(UserSession).where(UserSession.token == token).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_session(self, token: str) -> bool:
        result = await self.session.execute(
            delete(UserSession).where(UserSession.token == token)
        )
        return result.rowcount > 0

    # ── Cards ─────────────────────────────────────────────────────────────

    async def next_activities_no(self) -> str:
        # soft-deleted rows are counted too, so numbers are never reused
        total = await self.count(select(Card.activities_no))
        return ACTIVITIES_NO_FORMAT % (total + 1)

    async def create_card(
        self,
        author_id: int,
        title: str,
        content: str,
        marked: Optional[datetime] = None,
    ) -> Card:
        activities_no = await self.next_activities_no()
        card = Card(
            activities_no=activities_no,
            author_id=author_id,
            title=title,
            content=content,
            marked=marked,
        )
        self.session.add(card)
        await self.session.flush()
        logger.debug("Inserted card %s for author %d", activities_no, author_id)
        return card

    async def get_cards(
        self,
        author_id: int = 0,
        page: int = 1,
        size: int = 0,
    ) -> Tuple[List[Card], int]:
        """
        Lists live cards, optionally for one author, one page at a time.

        Returns the page of cards and the total number of matching cards.
        """
        page, size = self.normalize_pagination(page, size)

        stmt = select(Card).where(Card.deleted_at.is_(None))
        if author_id > 0:
            stmt = stmt.where(Card.author_id == author_id)

        total = await self.count(stmt)

        stmt = stmt.order_by(Card.created_at, Card.activities_no)
        stmt = self.select_query(self.pagination_query(stmt, page, size))
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def check_card(self, activities_no: str, author_id: int) -> Optional[Card]:
        stmt = self.select_query(
            select(Card)
            .where(
                Card.activities_no == activities_no,
                Card.author_id == author_id,
                Card.deleted_at.is_(None),
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_card(
        self,
        activities_no: str,
        author_id: int,
        title: str,
        content: str,
        marked: Optional[datetime],
        marked_status: Optional[str],
    ) -> bool:
        result = await self.session.execute(
            update(Card)
            .where(
                Card.activities_no == activities_no,
                Card.author_id == author_id,
                Card.deleted_at.is_(None),
            )
            .values(
                title=title,
                content=content,
                marked=marked,
                marked_status=marked_status,
                updated_at=datetime.now(timezone.utc),
            )
        )
        return result.rowcount > 0

    async def delete_card(self, activities_no: str, author_id: int) -> bool:
        now = datetime.now(timezone.utc)
        result = await self.session.execute(
            update(Card)
            .where(
                Card.activities_no == activities_no,
                Card.author_id == author_id,
                Card.deleted_at.is_(None),
            )
            .values(deleted_at=now, updated_at=now)
        )
        return result.rowcount > 0
