from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from campus_connect.errors import NotFoundError, TransientError, ValidationFailedError
from campus_connect.models.api.conversations import ConversationResponse
from campus_connect.services.create_conversation_service import (
    CreateConversationService,
)
from conftest import USER_A, USER_B


class TestCreateConversationService:
    """Unit tests for CreateConversationService."""

    @pytest.fixture
    def service(self, mock_db: AsyncMock) -> CreateConversationService:
        return CreateConversationService(mock_db)

    @pytest.mark.asyncio
    async def test_returns_existing_conversation(
        self, service: CreateConversationService, mock_db: AsyncMock
    ) -> None:
        """Test that an existing pair conversation is reused, not duplicated."""
        with (
            patch.object(
                service.user_repo, "exists", new_callable=AsyncMock, return_value=True
            ),
            patch.object(
                service.conversation_repo,
                "find_by_pair",
                new_callable=AsyncMock,
                return_value=4,
            ),
            patch.object(
                service.conversation_repo, "create_empty", new_callable=AsyncMock
            ) as mock_create,
        ):
            assert await service.get_or_create_conversation(USER_A, USER_B) == 4

        mock_create.assert_not_called()
        mock_db.commit.assert_not_called()
        # Rollback releases the pair lock taken before the lookup
        mock_db.rollback.assert_awaited_once()
        assert "pg_advisory_xact_lock" in str(mock_db.execute.call_args_list[0].args[0])

    @pytest.mark.asyncio
    async def test_creates_conversation_with_both_participants(
        self, service: CreateConversationService, mock_db: AsyncMock
    ) -> None:
        now = datetime.now(timezone.utc)
        conversation = ConversationResponse(id=12, created_at=now, updated_at=now)

        with (
            patch.object(
                service.user_repo, "exists", new_callable=AsyncMock, return_value=True
            ),
            patch.object(
                service.conversation_repo,
                "find_by_pair",
                new_callable=AsyncMock,
                return_value=None,
            ),
            patch.object(
                service.conversation_repo,
                "create_empty",
                new_callable=AsyncMock,
                return_value=conversation,
            ),
            patch.object(
                service.participant_repo, "add_participants", new_callable=AsyncMock
            ) as mock_add,
        ):
            assert await service.get_or_create_conversation(USER_A, USER_B) == 12

        conversation_id, user_ids, _ = mock_add.call_args.args
        assert conversation_id == 12
        assert sorted(user_ids) == [USER_A, USER_B]
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_self_conversation_rejected(
        self, service: CreateConversationService, mock_db: AsyncMock
    ) -> None:
        with pytest.raises(ValidationFailedError):
            await service.get_or_create_conversation(USER_A, USER_A)
        mock_db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_user(self, service: CreateConversationService) -> None:
        with patch.object(
            service.user_repo, "exists", new_callable=AsyncMock, return_value=False
        ):
            with pytest.raises(NotFoundError):
                await service.get_or_create_conversation(USER_A, "ghost")

    @pytest.mark.asyncio
    async def test_persistence_failure_rolls_back(
        self, service: CreateConversationService, mock_db: AsyncMock
    ) -> None:
        with (
            patch.object(
                service.user_repo, "exists", new_callable=AsyncMock, return_value=True
            ),
            patch.object(
                service.conversation_repo,
                "find_by_pair",
                new_callable=AsyncMock,
                side_effect=OperationalError("SELECT", {}, Exception("down")),
            ),
        ):
            with pytest.raises(TransientError):
                await service.get_or_create_conversation(USER_A, USER_B)

        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_called()
