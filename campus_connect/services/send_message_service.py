from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect import config
from campus_connect.errors import (
    PERSISTENCE_ERRORS,
    ValidationFailedError,
    persistence_error,
)
from campus_connect.logging_config import get_logger
from campus_connect.models.api.messages import MessageResponse
from campus_connect.realtime.channel import RealtimeChannel, get_realtime_channel
from campus_connect.repositories.conversation_repository import ConversationRepository
from campus_connect.repositories.message_repository import MessageRepository
from campus_connect.repositories.participant_repository import ParticipantRepository
from campus_connect.services.membership import ensure_participant

logger = get_logger(__name__)


class SendMessageService:
    """Service for writing messages to a conversation."""

    def __init__(self, db: AsyncSession, realtime: Optional[RealtimeChannel] = None):
        self.db = db
        self.realtime = realtime or get_realtime_channel()
        self.message_repo = MessageRepository(db)
        self.conversation_repo = ConversationRepository(db)
        self.participant_repo = ParticipantRepository(db)

    async def send_message(
        self, user_id: str, conversation_id: int, content: str
    ) -> MessageResponse:
        """
        Main business logic for sending a message:
        1. Validate content and membership before any write
        2. Save message to database
        3. Bump the conversation's updated_at to the message timestamp
        4. Commit, then notify subscribers (best effort)
        5. Return the persisted message
        """
        # Step 1: Validate
        text = self._validate_content(content)
        await ensure_participant(self.participant_repo, conversation_id, user_id)

        # Steps 2-3: Persist as one transaction
        try:
            # Sends to one conversation run one at a time, so id order and
            # created_at order agree
            await self.conversation_repo.lock_for_update(conversation_id)
            now = datetime.now(timezone.utc)
            message = await self.message_repo.create_message(
                conversation_id=conversation_id,
                sender_id=user_id,
                content=text,
                created_at=now,
            )
            await self.conversation_repo.touch(conversation_id, message.created_at)
            await self.db.commit()
        except PERSISTENCE_ERRORS as e:
            await self.db.rollback()
            logger.error(
                "message_persist_failed",
                conversation_id=conversation_id,
                sender_id=user_id,
                error=str(e),
            )
            raise persistence_error(e, "Failed to create message") from e

        logger.info(
            "message_sent",
            conversation_id=conversation_id,
            message_id=message.id,
            sender_id=user_id,
        )

        # Step 4: Notify; never undoes the write
        self._notify(message)

        # Step 5: Return persisted state
        return message

    def _validate_content(self, content: str) -> str:
        text = (content or "").strip()
        if not text:
            raise ValidationFailedError("Message content must not be empty")
        if len(text) > config.MAX_MESSAGE_LENGTH:
            raise ValidationFailedError(
                f"Message content must be at most {config.MAX_MESSAGE_LENGTH} characters",
                details={"max_length": config.MAX_MESSAGE_LENGTH},
            )
        return text

    def _notify(self, message: MessageResponse) -> None:
        try:
            self.realtime.publish(message.conversation_id, message)
        except Exception as e:
            logger.warning(
                "realtime_publish_failed",
                conversation_id=message.conversation_id,
                message_id=message.id,
                error=str(e),
            )
