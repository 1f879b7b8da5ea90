from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from campus_connect import config
from campus_connect.errors import (
    ForbiddenError,
    InternalError,
    TransientError,
    ValidationFailedError,
)
from campus_connect.realtime.broker import RealtimeBroker
from campus_connect.realtime.channel import RealtimeChannel
from campus_connect.services.send_message_service import SendMessageService
from conftest import USER_A, make_message


class TestSendMessageService:
    """Unit tests for SendMessageService."""

    @pytest.fixture
    def realtime(self) -> MagicMock:
        return MagicMock(spec=RealtimeChannel)

    @pytest.fixture
    def service(self, mock_db: AsyncMock, realtime: MagicMock) -> SendMessageService:
        """SendMessageService instance with a mocked realtime channel."""
        return SendMessageService(mock_db, realtime)

    @pytest.mark.asyncio
    async def test_send_message_success(
        self, service: SendMessageService, mock_db: AsyncMock, realtime: MagicMock
    ) -> None:
        """Test the message is persisted, the conversation touched, then published."""
        message = make_message(id=5, content="hello there")

        with (
            patch.object(
                service.participant_repo,
                "is_participant",
                new_callable=AsyncMock,
                return_value=True,
            ),
            patch.object(
                service.message_repo,
                "create_message",
                new_callable=AsyncMock,
                return_value=message,
            ) as mock_create,
            patch.object(
                service.conversation_repo, "touch", new_callable=AsyncMock
            ) as mock_touch,
        ):
            result = await service.send_message(USER_A, 10, "  hello there  ")

        assert result == message
        assert mock_create.call_args.kwargs["content"] == "hello there"
        assert mock_create.call_args.kwargs["sender_id"] == USER_A
        mock_touch.assert_awaited_once_with(10, message.created_at)
        mock_db.commit.assert_awaited_once()
        realtime.publish.assert_called_once_with(10, message)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    async def test_empty_content_rejected_before_any_write(
        self, service: SendMessageService, mock_db: AsyncMock, realtime: MagicMock, content: str
    ) -> None:
        with pytest.raises(ValidationFailedError):
            await service.send_message(USER_A, 10, content)

        mock_db.execute.assert_not_called()
        mock_db.commit.assert_not_called()
        realtime.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_content_length_limit(
        self, service: SendMessageService, mock_db: AsyncMock
    ) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            await service.send_message(USER_A, 10, "x" * (config.MAX_MESSAGE_LENGTH + 1))

        assert exc_info.value.details == {"max_length": config.MAX_MESSAGE_LENGTH}
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_content_at_limit_is_accepted(self, service: SendMessageService) -> None:
        text = "x" * config.MAX_MESSAGE_LENGTH
        with (
            patch.object(
                service.participant_repo,
                "is_participant",
                new_callable=AsyncMock,
                return_value=True,
            ),
            patch.object(
                service.message_repo,
                "create_message",
                new_callable=AsyncMock,
                return_value=make_message(content=text),
            ),
            patch.object(service.conversation_repo, "touch", new_callable=AsyncMock),
        ):
            result = await service.send_message(USER_A, 10, text)

        assert len(result.content) == config.MAX_MESSAGE_LENGTH

    @pytest.mark.asyncio
    async def test_non_participant_is_forbidden(
        self, service: SendMessageService, mock_db: AsyncMock, realtime: MagicMock
    ) -> None:
        with (
            patch.object(
                service.participant_repo,
                "is_participant",
                new_callable=AsyncMock,
                return_value=False,
            ),
            patch.object(
                service.message_repo, "create_message", new_callable=AsyncMock
            ) as mock_create,
        ):
            with pytest.raises(ForbiddenError):
                await service.send_message(USER_A, 10, "hi")

        mock_create.assert_not_called()
        mock_db.commit.assert_not_called()
        realtime.publish.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error,expected",
        [
            (OperationalError("INSERT", {}, Exception("timeout")), TransientError),
            (TimeoutError(), TransientError),
            (IntegrityError("INSERT", {}, Exception("fk")), InternalError),
        ],
    )
    async def test_persistence_failure_rolls_back_and_skips_publish(
        self,
        service: SendMessageService,
        mock_db: AsyncMock,
        realtime: MagicMock,
        error: Exception,
        expected: Any,
    ) -> None:
        """Test a failed write is rolled back and nothing is announced."""
        with (
            patch.object(
                service.participant_repo,
                "is_participant",
                new_callable=AsyncMock,
                return_value=True,
            ),
            patch.object(
                service.message_repo,
                "create_message",
                new_callable=AsyncMock,
                side_effect=error,
            ),
        ):
            with pytest.raises(expected):
                await service.send_message(USER_A, 10, "hi")

        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_called()
        realtime.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_publish_failure_does_not_fail_send(
        self, service: SendMessageService, mock_db: AsyncMock, realtime: MagicMock
    ) -> None:
        """Test the write stands even when notification raises."""
        message = make_message()
        realtime.publish.side_effect = RuntimeError("broker down")

        with (
            patch.object(
                service.participant_repo,
                "is_participant",
                new_callable=AsyncMock,
                return_value=True,
            ),
            patch.object(
                service.message_repo,
                "create_message",
                new_callable=AsyncMock,
                return_value=message,
            ),
            patch.object(service.conversation_repo, "touch", new_callable=AsyncMock),
        ):
            result = await service.send_message(USER_A, 10, "hello")

        assert result == message
        mock_db.commit.assert_awaited_once()
        mock_db.rollback.assert_not_called()

    @pytest.mark.asyncio
    async def test_subscriber_receives_published_message(self, mock_db: AsyncMock) -> None:
        """Test end to end through a real broker subscription."""
        channel = RealtimeChannel(RealtimeBroker(max_queue_size=10))
        service = SendMessageService(mock_db, channel)
        message = make_message(id=8)
        subscription = channel.subscribe(10)

        with (
            patch.object(
                service.participant_repo,
                "is_participant",
                new_callable=AsyncMock,
                return_value=True,
            ),
            patch.object(
                service.message_repo,
                "create_message",
                new_callable=AsyncMock,
                return_value=message,
            ),
            patch.object(service.conversation_repo, "touch", new_callable=AsyncMock),
        ):
            await service.send_message(USER_A, 10, "hello")

        event = await subscription.get(timeout=1)
        assert event is not None
        assert event.topic == "chat-10"
        assert event.event == "new-message"
        assert event.data["id"] == 8
        subscription.unsubscribe()

    @pytest.mark.asyncio
    async def test_conversation_locked_before_timestamp_and_insert(
        self, service: SendMessageService, mock_db: AsyncMock
    ) -> None:
        """Test the conversation row is locked before the message is stamped."""
        calls = MagicMock()
        message = make_message()

        async def create_message(**kwargs: Any) -> Any:
            calls.create_message(**kwargs)
            return message

        with (
            patch.object(
                service.participant_repo,
                "is_participant",
                new_callable=AsyncMock,
                return_value=True,
            ),
            patch.object(
                service.conversation_repo,
                "lock_for_update",
                new_callable=AsyncMock,
                side_effect=lambda conversation_id: calls.lock(conversation_id),
            ),
            patch.object(
                service.message_repo, "create_message", side_effect=create_message
            ),
            patch.object(
                service.conversation_repo,
                "touch",
                new_callable=AsyncMock,
                side_effect=lambda *args: calls.touch(*args),
            ),
            patch("campus_connect.services.send_message_service.datetime") as mock_datetime,
        ):
            def stamp(tz: Any) -> Any:
                calls.now()
                return message.created_at

            mock_datetime.now.side_effect = stamp
            await service.send_message(USER_A, 10, "hello")

        assert [c[0] for c in calls.mock_calls] == ["lock", "now", "create_message", "touch"]
        assert calls.lock.call_args.args == (10,)
