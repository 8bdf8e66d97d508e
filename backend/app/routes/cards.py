"""
Todo Cards Backend — Card Route Handlers
==========================================

What:  GET/POST/PUT /card and DELETE /card/{id}.
How:   Every route requires a session token; the token's user is the author
       of anything created, updated or deleted. A body `author_id` naming a
       different user is rejected with 403.

List response:
    {
        "next": "http://host/card?page=3&size=10",
        "prev": "http://host/card?page=1&size=10",
        "total": 42,
        "data": [ {card}, ... ]
    }
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.exceptions import NotAuthorizedError
from app.repository import Repository
from app.routes.deps import current_user_id
from app.schemas.card import (
    CardCreateRequest,
    CardListResponse,
    CardResponse,
    CardUpdateRequest,
)
from app.schemas.common import ErrorResponse
from app.services.card_service import card_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Cards"])

AUTH_ERRORS = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "author_id is not the logged-in user", "model": ErrorResponse},
}


def _resolve_author(requested: Optional[int], user_id: int) -> int:
    if requested is not None and requested != user_id:
        raise NotAuthorizedError(
            context={"requested_author_id": requested, "user_id": user_id},
        )
    return user_id


@router.get(
    "/card",
    response_model=CardListResponse,
    responses={400: {"description": "Non-integer query parameter", "model": ErrorResponse}, **AUTH_ERRORS},
    summary="List cards with page/size pagination",
)
async def list_cards(
    request: Request,
    response: Response,
    author_id: int = Query(default=0, description="Only this author's cards; 0 lists all"),
    page: int = Query(default=1, description="1-based page; values <= 0 mean 1"),
    size: int = Query(
        default=settings.default_page_size,
        description="Page size; values <= 0 mean the default",
    ),
    _user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> CardListResponse:
    cards, total = await card_service.get_all_cards(db=db, author_id=author_id, page=page, size=size)

    page, size = Repository.normalize_pagination(page, size)
    next_url = None
    prev_url = None
    if page * size < total:
        next_url = str(request.url.include_query_params(page=page + 1, size=size))
    if page > 1:
        prev_url = str(request.url.include_query_params(page=page - 1, size=size))

    logger.debug("Listed %d of %d cards (author_id=%d, page=%d)", len(cards), total, author_id, page)
    response.headers["X-Total-Count"] = str(total)
    return CardListResponse(next=next_url, prev=prev_url, total=total, data=cards)


@router.post(
    "/card",
    status_code=201,
    response_model=CardResponse,
    responses={400: {"description": "Invalid body or marked layout", "model": ErrorResponse}, **AUTH_ERRORS},
    summary="Create a card",
)
async def create_card(
    body: CardCreateRequest,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> CardResponse:
    return await card_service.create_card(
        db=db,
        author_id=_resolve_author(body.author_id, user_id),
        title=body.title,
        content=body.content,
        marked=body.marked,
    )


@router.put(
    "/card",
    status_code=204,
    responses={
        400: {"description": "Invalid body or marked layout", "model": ErrorResponse},
        404: {"description": "Card not found for this author", "model": ErrorResponse},
        422: {"description": "Card already marked", "model": ErrorResponse},
        **AUTH_ERRORS,
    },
    summary="Update an open card",
)
async def update_card(
    body: CardUpdateRequest,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await card_service.update_card(
        db=db,
        author_id=_resolve_author(body.author_id, user_id),
        activities_no=body.activities_no,
        title=body.title,
        content=body.content,
        marked=body.marked,
        marked_status=body.marked_status,
    )
    return Response(status_code=204)


@router.delete(
    "/card/{activities_no}",
    status_code=204,
    responses={404: {"description": "Card not found for this author", "model": ErrorResponse}, **AUTH_ERRORS},
    summary="Soft-delete a card",
)
async def delete_card(
    activities_no: str,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await card_service.delete_card(db=db, author_id=user_id, activities_no=activities_no)
    return Response(status_code=204)
