"""
Todo Cards Backend — Card Service Unit Tests
==============================================

What:  Card create/list/update/delete business rules.
How:   Mock DB sessions; no real database.

What we test:
    ✅ Author id and marked-layout validation
    ✅ Sequential activities numbers and retry on number collisions
    ✅ A marked card cannot be updated again
    ✅ Soft delete of missing cards raises NotFoundError
    ✅ Timestamp rendering in the client layout
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from app.exceptions import (
    CardAlreadyMarkedError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from app.services.card_service import CardService, card_to_response


def duplicate_key() -> IntegrityError:
    return IntegrityError("INSERT INTO cards", {}, Exception("duplicate key value"))


class TestCreateCard:

    def setup_method(self):
        self.service = CardService()

    @pytest.mark.asyncio
    async def test_create_assigns_next_number(self, mock_db_session, db_result):
        mock_db_session.execute.return_value = db_result(scalar=2)

        result = await self.service.create_card(
            mock_db_session, author_id=7, title="Buy milk", content="Two litres"
        )

        assert result.activities_no == "AC-0003"
        assert result.author_id == 7
        assert result.marked is None
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_with_marked_timestamp(self, mock_db_session, db_result):
        mock_db_session.execute.return_value = db_result(scalar=0)

        result = await self.service.create_card(
            mock_db_session, author_id=7, title="t", content="c", marked="2024-03-01 09:15:00"
        )

        assert result.marked == "2024-03-01 09:15:00"
        stored = mock_db_session.add.call_args.args[0]
        assert stored.marked == datetime(2024, 3, 1, 9, 15, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("author_id", [0, -3])
    async def test_create_rejects_non_positive_author(self, mock_db_session, author_id):
        with pytest.raises(NotFoundError):
            await self.service.create_card(mock_db_session, author_id=author_id, title="t", content="c")
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("marked", ["2024-03-01", "01/03/2024 09:15:00", "2024-03-01T09:15:00Z"])
    async def test_create_rejects_bad_marked_layout(self, mock_db_session, marked):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_card(
                mock_db_session, author_id=7, title="t", content="c", marked=marked
            )
        assert exc_info.value.field == "marked"

    @pytest.mark.asyncio
    async def test_create_retries_after_number_collision(self, mock_db_session, make_card):
        card = make_card("AC-0006")
        with patch(
            "app.services.card_service.run_in_transaction",
            AsyncMock(side_effect=[duplicate_key(), card]),
        ) as tx:
            result = await self.service.create_card(mock_db_session, author_id=7, title="t", content="c")

        assert result.activities_no == "AC-0006"
        assert tx.await_count == 2

    @pytest.mark.asyncio
    async def test_create_gives_up_after_repeated_collisions(self, mock_db_session):
        with patch(
            "app.services.card_service.run_in_transaction",
            AsyncMock(side_effect=duplicate_key()),
        ) as tx:
            with pytest.raises(DatabaseError):
                await self.service.create_card(mock_db_session, author_id=7, title="t", content="c")

        assert tx.await_count == 3


class TestListCards:

    def setup_method(self):
        self.service = CardService()

    @pytest.mark.asyncio
    async def test_list_maps_rows(self, mock_db_session, db_result, make_card):
        cards = [make_card("AC-0001"), make_card("AC-0002", marked_status="done")]
        mock_db_session.execute.side_effect = [db_result(scalar=2), db_result(rows=cards)]

        data, total = await self.service.get_all_cards(mock_db_session, author_id=7, page=1, size=10)

        assert total == 2
        assert [c.activities_no for c in data] == ["AC-0001", "AC-0002"]
        assert data[1].marked_status == "done"
        assert data[0].created_at == "2024-01-15 08:30:00"
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_list_wraps_database_errors(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

        with pytest.raises(DatabaseError):
            await self.service.get_all_cards(mock_db_session)


class TestUpdateCard:

    def setup_method(self):
        self.service = CardService()

    @pytest.mark.asyncio
    async def test_update_open_card(self, mock_db_session, db_result, make_card):
        mock_db_session.execute.side_effect = [
            db_result(one=make_card("AC-0004")),
            db_result(rowcount=1),
        ]

        await self.service.update_card(
            mock_db_session,
            author_id=7,
            activities_no="AC-0004",
            title="Buy oat milk",
            content="",
            marked="2024-03-02 18:00:00",
            marked_status="done",
        )

        update_stmt = mock_db_session.execute.await_args_list[1].args[0]
        params = update_stmt.compile().params
        assert params["title"] == "Buy oat milk"
        assert params["marked"] == datetime(2024, 3, 2, 18, 0, tzinfo=timezone.utc)
        assert params["marked_status"] == "done"
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_empty_values_become_null(self, mock_db_session, db_result, make_card):
        mock_db_session.execute.side_effect = [
            db_result(one=make_card("AC-0004")),
            db_result(rowcount=1),
        ]

        await self.service.update_card(
            mock_db_session, author_id=7, activities_no="AC-0004",
            title="t", content="c", marked="", marked_status="",
        )

        params = mock_db_session.execute.await_args_list[1].args[0].compile().params
        assert params["marked"] is None
        assert params["marked_status"] is None

    @pytest.mark.asyncio
    async def test_update_already_marked_rejected(self, mock_db_session, db_result, make_card):
        marked = make_card("AC-0004", marked=datetime(2024, 1, 1, tzinfo=timezone.utc))
        mock_db_session.execute.return_value = db_result(one=marked)

        with pytest.raises(CardAlreadyMarkedError, match="already marked"):
            await self.service.update_card(
                mock_db_session, author_id=7, activities_no="AC-0004", title="t", content="c"
            )

        assert mock_db_session.execute.await_count == 1
        mock_db_session.rollback.assert_awaited_once()
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_unknown_card(self, mock_db_session, db_result):
        mock_db_session.execute.return_value = db_result(one=None)

        with pytest.raises(NotFoundError):
            await self.service.update_card(
                mock_db_session, author_id=7, activities_no="AC-0099", title="t", content="c"
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("author_id, activities_no", [(0, "AC-0001"), (7, "")])
    async def test_update_requires_author_and_number(self, mock_db_session, author_id, activities_no):
        with pytest.raises(NotFoundError):
            await self.service.update_card(
                mock_db_session, author_id=author_id, activities_no=activities_no, title="t", content="c"
            )
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_bad_marked_layout(self, mock_db_session, db_result, make_card):
        mock_db_session.execute.return_value = db_result(one=make_card("AC-0004"))

        with pytest.raises(ValidationError):
            await self.service.update_card(
                mock_db_session, author_id=7, activities_no="AC-0004",
                title="t", content="c", marked="tomorrow",
            )
        mock_db_session.commit.assert_not_awaited()


class TestDeleteCard:

    def setup_method(self):
        self.service = CardService()

    @pytest.mark.asyncio
    async def test_delete_existing(self, mock_db_session, db_result):
        mock_db_session.execute.return_value = db_result(rowcount=1)
        await self.service.delete_card(mock_db_session, author_id=7, activities_no="AC-0001")
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_missing(self, mock_db_session, db_result):
        mock_db_session.execute.return_value = db_result(rowcount=0)
        with pytest.raises(NotFoundError):
            await self.service.delete_card(mock_db_session, author_id=7, activities_no="AC-0001")
        mock_db_session.rollback.assert_awaited_once()


class TestCardMapping:

    def test_timestamps_rendered_in_client_layout(self, make_card):
        card = make_card(
            marked=datetime(2024, 2, 29, 23, 59, 59, tzinfo=timezone.utc),
            deleted_at=None,
        )
        response = card_to_response(card)
        assert response.marked == "2024-02-29 23:59:59"
        assert response.updated_at == "2024-01-15 08:30:00"
        assert response.deleted_at is None

    def test_timestamps_follow_configured_zone(self, make_card):
        from zoneinfo import ZoneInfo

        card = make_card(marked=datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc))
        with patch("app.timestamps.settings") as mock_settings:
            mock_settings.tzinfo = ZoneInfo("Asia/Jakarta")
            assert card_to_response(card).marked == "2024-01-01 07:00:00"
