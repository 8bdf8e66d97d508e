"""
Todo Cards Backend — Shared Route Dependencies
================================================

What:  Resolves the bearer token on protected routes to a user id.
How:   Reads the Authorization header ("Bearer <token>" or a bare token) and
       asks UserService to authenticate it against the sessions table.
"""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.security import parse_bearer_token
from app.services.user_service import user_service


def bearer_token(authorization: Optional[str] = Header(default=None)) -> str:
    return parse_bearer_token(authorization)


async def current_user_id(
    token: str = Depends(bearer_token),
    db: AsyncSession = Depends(get_db_session),
) -> int:
    """
    Dependency for routes that require a logged-in user.

    Raises AuthenticationError (→ 401) for missing, unknown or expired tokens.
    """
    return await user_service.authenticate(db, token)
