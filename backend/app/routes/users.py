"""
Todo Cards Backend — User and Auth Route Handlers
===================================================

What:  POST /user/register, POST /auth/login, POST /auth/logout.
How:   Validates the JSON body with Pydantic, delegates to UserService.
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.routes.deps import bearer_token, current_user_id
from app.schemas.common import ErrorResponse
from app.schemas.user import LoginRequest, LoginResponse, RegisterRequest, UserResponse
from app.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])


@router.post(
    "/user/register",
    status_code=201,
    response_model=UserResponse,
    responses={
        400: {"description": "Malformed body", "model": ErrorResponse},
        422: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Register a new account",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.register(
        db=db,
        name=body.name,
        email=body.email,
        password=body.password,
    )


@router.post(
    "/auth/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Malformed body", "model": ErrorResponse},
        422: {"description": "Invalid login", "model": ErrorResponse},
    },
    summary="Log in and receive a session token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    """
    Returns the user's id (used as `author_id` on cards) and a session
    token to send as `Authorization: Bearer <token>`.
    """
    return await user_service.login(db=db, email=body.email, password=body.password)


@router.post(
    "/auth/logout",
    status_code=204,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="End the current session",
)
async def logout(
    user_id: int = Depends(current_user_id),
    token: str = Depends(bearer_token),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await user_service.logout(db=db, token=token)
    logger.info("User %d logged out", user_id)
    return Response(status_code=204)
