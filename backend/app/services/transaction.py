"""
Todo Cards Backend — Transaction Helper
=========================================

What:  Runs a unit of work inside one database transaction.
How:   Hands a locking Repository bound to the session to the callable,
       commits when it returns and rolls back when it raises.
Who:   Used by every service operation that writes.

    result = await run_in_transaction(db, lambda repo: repo.create_user(...))
"""

import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError
from app.repository import Repository

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_in_transaction(
    session: AsyncSession,
    fn: Callable[[Repository], Awaitable[T]],
) -> T:
    """
    Execute `fn(repo)` in a transaction and return its result.

    If `fn` or the commit fails, the transaction is rolled back and the first exception is
    re-raised. If the rollback fails too, a DatabaseError carrying both
    errors is raised instead.
    """
    repo = Repository(session, for_update=True)
    try:
        result = await fn(repo)
        await session.commit()
    except Exception as exc:
        try:
            await session.rollback()
        except Exception as rb_exc:
            logger.error("Rollback failed after %s: %s", type(exc).__name__, rb_exc)
            raise DatabaseError(
                context={
                    "tx_error": repr(exc),
                    "rollback_error": repr(rb_exc),
                },
            ) from exc
        raise

    return result
