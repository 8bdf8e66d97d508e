"""
Todo Cards Backend — Card Service
===================================

What:  Business rules for creating, listing, updating and deleting cards.
How:   Validates input, runs writes through run_in_transaction, maps ORM
       rows to CardResponse.
Who:   Called by the card route handlers.

Rules:
    - The author id must be positive
    - A card can be marked at most once: once `marked` is set, updates fail
    - `marked` travels as "YYYY-MM-DD HH:MM:SS"; an empty value means open
    - Deleting is soft; deleted cards disappear from listings and updates
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from app.config import settings
from app.exceptions import (
    CardAlreadyMarkedError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from app.models.card import Card
from app.repository import Repository
from app.schemas.card import CardResponse
from app.services.transaction import run_in_transaction
from app.timestamps import TIMESTAMP_LAYOUT, format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)


def card_to_response(card: Card) -> CardResponse:
    return CardResponse(
        activities_no=card.activities_no,
        title=card.title,
        content=card.content,
        author_id=card.author_id,
        marked=format_timestamp(card.marked),
        marked_status=card.marked_status,
        created_at=format_timestamp(card.created_at),
        updated_at=format_timestamp(card.updated_at),
        deleted_at=format_timestamp(card.deleted_at),
    )


def _parse_marked(value: Optional[str]):
    try:
        return parse_timestamp(value)
    except ValueError:
        raise ValidationError(
            message=f"invalid date format for marked: expected {TIMESTAMP_LAYOUT!r}, got {value!r}",
            field="marked",
        )


class CardService:
    """
    Business logic layer for card operations.

    Stateless: every method receives the request's database session.
    Database failures are wrapped in DatabaseError; business rule
    violations raise their own exception types.
    """

    async def create_card(
        self,
        db: AsyncSession,
        author_id: int,
        title: str,
        content: str,
        marked: Optional[str] = None,
    ) -> CardResponse:
        """
        Create a card with the next activities number.

        Raises:
            NotFoundError: non-positive author id (→ 404)
            ValidationError: `marked` is not "YYYY-MM-DD HH:MM:SS" (→ 400)
            DatabaseError: insert failed, including running out of retries
                           on activities number collisions (→ 500)
        """
        if author_id <= 0:
            raise NotFoundError(resource="author", resource_id=str(author_id))
        marked_at = _parse_marked(marked)

        try:
            card = await self._insert_card(db, author_id, title, content, marked_at)
        except SQLAlchemyError as e:
            logger.error("Database error creating card for author %d: %s", author_id, e)
            raise DatabaseError(
                message="Could not create the card. Please try again.",
                context={"author_id": author_id, "error_type": type(e).__name__},
            ) from e

        logger.info("Card %s created by author %d", card.activities_no, author_id)
        return card_to_response(card)

    @retry(
        retry=retry_if_exception_type(IntegrityError),
        stop=stop_after_attempt(settings.card_number_retries),
        wait=wait_exponential_jitter(initial=0.01, max=0.2),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _insert_card(
        self,
        db: AsyncSession,
        author_id: int,
        title: str,
        content: str,
        marked_at: Optional[datetime],
    ) -> Card:
        # Each attempt recounts, so a collision on activities_no picks a new number
        return await run_in_transaction(
            db,
            lambda repo: repo.create_card(
                author_id=author_id,
                title=title,
                content=content,
                marked=marked_at,
            ),
        )

    async def get_all_cards(
        self,
        db: AsyncSession,
        author_id: int = 0,
        page: int = 1,
        size: int = 10,
    ) -> Tuple[List[CardResponse], int]:
        """
        List live cards, newest last, one page at a time.

        author_id <= 0 lists every author's cards.
        """
        try:
            cards, total = await Repository(db).get_cards(author_id=author_id, page=page, size=size)
        except SQLAlchemyError as e:
            logger.error("Database error listing cards: %s", e, exc_info=True)
            raise DatabaseError(
                message="Could not retrieve cards. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        return [card_to_response(card) for card in cards], total

    async def update_card(
        self,
        db: AsyncSession,
        author_id: int,
        activities_no: str,
        title: str,
        content: str,
        marked: Optional[str] = None,
        marked_status: Optional[str] = None,
    ) -> None:
        """
        Update an open card of the given author.

        Raises:
            NotFoundError: bad author id, empty or unknown card number (→ 404)
            CardAlreadyMarkedError: the stored card is already marked (→ 422)
            ValidationError: `marked` layout is wrong (→ 400)
        """

        async def apply(repo: Repository) -> None:
            if author_id <= 0:
                raise NotFoundError(resource="card author", resource_id=str(author_id))
            if not activities_no:
                raise NotFoundError(resource="card")

            card = await repo.check_card(activities_no, author_id)
            if card is None:
                raise NotFoundError(
                    resource="card",
                    resource_id=activities_no,
                    context={"author_id": author_id},
                )
            if card.marked is not None:
                raise CardAlreadyMarkedError(activities_no)

            await repo.update_card(
                activities_no=activities_no,
                author_id=author_id,
                title=title,
                content=content,
                marked=_parse_marked(marked),
                marked_status=marked_status or None,
            )

        try:
            await run_in_transaction(db, apply)
        except SQLAlchemyError as e:
            logger.error("Database error updating card %s: %s", activities_no, e)
            raise DatabaseError(
                message="Could not update the card. Please try again.",
                context={"activities_no": activities_no, "error_type": type(e).__name__},
            ) from e

        logger.info("Card %s updated by author %d", activities_no, author_id)

    async def delete_card(self, db: AsyncSession, author_id: int, activities_no: str) -> None:
        """Soft-delete one of the author's cards. Unknown cards raise NotFoundError."""

        async def remove(repo: Repository) -> None:
            if not await repo.delete_card(activities_no, author_id):
                raise NotFoundError(
                    resource="card",
                    resource_id=activities_no,
                    context={"author_id": author_id},
                )

        try:
            await run_in_transaction(db, remove)
        except SQLAlchemyError as e:
            logger.error("Database error deleting card %s: %s", activities_no, e)
            raise DatabaseError(
                message="Could not delete the card. Please try again.",
                context={"activities_no": activities_no, "error_type": type(e).__name__},
            ) from e

        logger.info("Card %s deleted by author %d", activities_no, author_id)


card_service = CardService()
