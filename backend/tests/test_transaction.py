"""
Todo Cards Backend — Transaction Helper Tests
===============================================
"""

import pytest
from sqlalchemy.exc import OperationalError

from app.exceptions import DatabaseError, NotFoundError
from app.repository import Repository
from app.services.transaction import run_in_transaction


class TestRunInTransaction:

    @pytest.mark.asyncio
    async def test_commits_and_returns_result(self, mock_db_session):
        seen = []

        async def work(repo):
            seen.append(repo)
            return "done"

        assert await run_in_transaction(mock_db_session, work) == "done"

        mock_db_session.commit.assert_awaited_once()
        mock_db_session.rollback.assert_not_awaited()
        assert isinstance(seen[0], Repository)
        assert seen[0].session is mock_db_session
        assert seen[0].for_update is True

    @pytest.mark.asyncio
    async def test_rolls_back_and_reraises(self, mock_db_session):
        async def work(repo):
            raise NotFoundError(resource="card", resource_id="AC-0001")

        with pytest.raises(NotFoundError):
            await run_in_transaction(mock_db_session, work)

        mock_db_session.rollback.assert_awaited_once()
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_rollback_reports_both_errors(self, mock_db_session):
        mock_db_session.rollback.side_effect = OperationalError("ROLLBACK", {}, Exception("gone"))

        async def work(repo):
            raise ValueError("boom")

        with pytest.raises(DatabaseError) as exc_info:
            await run_in_transaction(mock_db_session, work)

        context = exc_info.value.context
        assert "boom" in context["tx_error"]
        assert "gone" in context["rollback_error"]
        assert isinstance(exc_info.value.__cause__, ValueError)

    @pytest.mark.asyncio
    async def test_failed_commit_rolls_back(self, mock_db_session):
        mock_db_session.commit.side_effect = OperationalError("COMMIT", {}, Exception("lost"))

        async def work(repo):
            return "done"

        with pytest.raises(OperationalError):
            await run_in_transaction(mock_db_session, work)

        mock_db_session.rollback.assert_awaited_once()
