from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from campus_connect.errors import ForbiddenError, TransientError
from campus_connect.realtime.channel import RealtimeChannel
from campus_connect.services.conversation_activity_service import (
    ConversationActivityService,
)
from conftest import USER_A, USER_C


class TestConversationActivityService:
    """Unit tests for read markers and typing signals."""

    @pytest.fixture
    def realtime(self) -> MagicMock:
        return MagicMock(spec=RealtimeChannel)

    @pytest.fixture
    def service(
        self, mock_db: AsyncMock, realtime: MagicMock
    ) -> ConversationActivityService:
        return ConversationActivityService(mock_db, realtime)

    @pytest.mark.asyncio
    async def test_mark_conversation_read(
        self,
        service: ConversationActivityService,
        mock_db: AsyncMock,
        realtime: MagicMock,
    ) -> None:
        with (
            patch.object(
                service.participant_repo,
                "is_participant",
                new_callable=AsyncMock,
                return_value=True,
            ),
            patch.object(
                service.participant_repo, "mark_read", new_callable=AsyncMock
            ) as mock_last_read,
            patch.object(
                service.message_repo, "mark_read", new_callable=AsyncMock, return_value=2
            ) as mock_status,
        ):
            receipt = await service.mark_conversation_read(USER_A, 10)

        assert receipt.messages_marked == 2
        assert receipt.user_id == USER_A
        mock_last_read.assert_awaited_once_with(10, USER_A, receipt.last_read)
        mock_status.assert_awaited_once_with(10, USER_A)
        mock_db.commit.assert_awaited_once()
        realtime.publish_read.assert_called_once_with(10, USER_A, receipt.last_read)

    @pytest.mark.asyncio
    async def test_mark_read_forbidden(
        self, service: ConversationActivityService, mock_db: AsyncMock
    ) -> None:
        with patch.object(
            service.participant_repo,
            "is_participant",
            new_callable=AsyncMock,
            return_value=False,
        ):
            with pytest.raises(ForbiddenError):
                await service.mark_conversation_read(USER_C, 10)
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_mark_read_failure_rolls_back(
        self,
        service: ConversationActivityService,
        mock_db: AsyncMock,
        realtime: MagicMock,
    ) -> None:
        with (
            patch.object(
                service.participant_repo,
                "is_participant",
                new_callable=AsyncMock,
                return_value=True,
            ),
            patch.object(
                service.participant_repo,
                "mark_read",
                new_callable=AsyncMock,
                side_effect=OperationalError("UPDATE", {}, Exception("down")),
            ),
        ):
            with pytest.raises(TransientError):
                await service.mark_conversation_read(USER_A, 10)

        mock_db.rollback.assert_awaited_once()
        realtime.publish_read.assert_not_called()

    @pytest.mark.asyncio
    async def test_set_typing_status(
        self, service: ConversationActivityService, realtime: MagicMock
    ) -> None:
        with patch.object(
            service.participant_repo,
            "is_participant",
            new_callable=AsyncMock,
            return_value=True,
        ):
            await service.set_typing_status(USER_A, 10, True)

        realtime.publish_typing.assert_called_once_with(10, USER_A, True)

    @pytest.mark.asyncio
    async def test_set_typing_status_forbidden(
        self, service: ConversationActivityService, realtime: MagicMock
    ) -> None:
        with patch.object(
            service.participant_repo,
            "is_participant",
            new_callable=AsyncMock,
            return_value=False,
        ):
            with pytest.raises(ForbiddenError):
                await service.set_typing_status(USER_C, 10, True)

        realtime.publish_typing.assert_not_called()
