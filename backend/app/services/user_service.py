"""
Todo Cards Backend — User Service
===================================

What:  Registration, login, logout and bearer-token authentication.
How:   Writes run through run_in_transaction; password hashing runs in a
       worker thread so Argon2 never blocks the event loop.
Who:   Called by the user/auth routes and the `current_user_id` dependency.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import (
    AlreadyRegisteredError,
    AuthenticationError,
    DatabaseError,
    InvalidLoginError,
)
from app.repository import Repository
from app.schemas.user import LoginResponse, UserResponse
from app.security import hash_password, new_session_token, verify_password
from app.services.transaction import run_in_transaction

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """
    Business logic for accounts and sessions.

    Stateless: every method receives the request's database session.
    """

    async def register(
        self,
        db: AsyncSession,
        name: str,
        email: str,
        password: str,
    ) -> UserResponse:
        """
        Create an account.

        Raises:
            AlreadyRegisteredError: the email already has an account (→ 422)
            DatabaseError: the insert failed (→ 500)
        """
        email = _normalize_email(email)
        password_hash = await asyncio.to_thread(hash_password, password)

        async def create(repo: Repository):
            if await repo.check_user(email) is not None:
                raise AlreadyRegisteredError(email)
            return await repo.create_user(name=name, email=email, password_hash=password_hash)

        try:
            user = await run_in_transaction(db, create)
        except IntegrityError:
            # lost a race with a concurrent registration of the same email
            raise AlreadyRegisteredError(email)
        except SQLAlchemyError as e:
            logger.error("Database error registering %s: %s", email, e)
            raise DatabaseError(
                message="Could not register the account. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Registered user %d", user.id)
        return UserResponse(id=user.id, name=user.name, email=user.email)

    async def login(self, db: AsyncSession, email: str, password: str) -> LoginResponse:
        """
        Check credentials and open a session.

        Raises:
            InvalidLoginError: unknown email or wrong password (→ 422)
        """
        email = _normalize_email(email)
        try:
            user = await Repository(db).check_user(email)
        except SQLAlchemyError as e:
            logger.error("Database error looking up %s: %s", email, e)
            raise DatabaseError(context={"error_type": type(e).__name__}) from e

        if user is None:
            logger.info("Login rejected: no account for %s", email)
            raise InvalidLoginError()

        if not await asyncio.to_thread(verify_password, password, user.password_hash):
            logger.info("Login rejected: password mismatch for user %d", user.id)
            raise InvalidLoginError()

        token = new_session_token()
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=settings.session_ttl_seconds)

        try:
            await run_in_transaction(
                db, lambda repo: repo.create_session(token, user.id, expires_at)
            )
        except SQLAlchemyError as e:
            logger.error("Database error creating session for user %d: %s", user.id, e)
            raise DatabaseError(context={"error_type": type(e).__name__}) from e

        logger.info("User %d logged in", user.id)
        return LoginResponse(author_id=user.id, token=token)

    async def logout(self, db: AsyncSession, token: str) -> None:
        """Ends a session. Unknown tokens are ignored."""
        try:
            await run_in_transaction(db, lambda repo: repo.delete_session(token))
        except SQLAlchemyError as e:
            raise DatabaseError(context={"error_type": type(e).__name__}) from e

    async def authenticate(self, db: AsyncSession, token: str) -> int:
        """
        Resolve a session token to the id of its user.

        Raises:
            AuthenticationError: missing, unknown or expired token (→ 401)
        """
        if not token:
            raise AuthenticationError()

        try:
            user_session = await Repository(db).get_session(token)
        except SQLAlchemyError as e:
            logger.error("Database error resolving session: %s", e)
            raise DatabaseError(context={"error_type": type(e).__name__}) from e

        if user_session is None:
            raise AuthenticationError("Invalid or expired session token")

        expires_at = user_session.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if expires_at <= datetime.now(timezone.utc):
            raise AuthenticationError("Invalid or expired session token")

        return user_session.user_id


user_service = UserService()
