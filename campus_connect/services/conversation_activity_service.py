from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect.errors import PERSISTENCE_ERRORS, persistence_error
from campus_connect.logging_config import get_logger
from campus_connect.models.api.conversations import ReadReceipt
from campus_connect.realtime.channel import RealtimeChannel, get_realtime_channel
from campus_connect.repositories.message_repository import MessageRepository
from campus_connect.repositories.participant_repository import ParticipantRepository
from campus_connect.services.membership import ensure_participant

logger = get_logger(__name__)


class ConversationActivityService:
    """Read markers and typing signals."""

    def __init__(self, db: AsyncSession, realtime: Optional[RealtimeChannel] = None):
        self.db = db
        self.realtime = realtime or get_realtime_channel()
        self.participant_repo = ParticipantRepository(db)
        self.message_repo = MessageRepository(db)

    async def mark_conversation_read(
        self, user_id: str, conversation_id: int
    ) -> ReadReceipt:
        """Advance the caller's last_read and mark received messages read."""
        await ensure_participant(self.participant_repo, conversation_id, user_id)

        read_at = datetime.now(timezone.utc)
        try:
            await self.participant_repo.mark_read(conversation_id, user_id, read_at)
            marked = await self.message_repo.mark_read(conversation_id, user_id)
            await self.db.commit()
        except PERSISTENCE_ERRORS as e:
            await self.db.rollback()
            raise persistence_error(e, "Failed to mark conversation read") from e

        try:
            self.realtime.publish_read(conversation_id, user_id, read_at)
        except Exception as e:
            logger.warning(
                "realtime_publish_failed", conversation_id=conversation_id, error=str(e)
            )

        return ReadReceipt(
            conversation_id=conversation_id,
            user_id=user_id,
            last_read=read_at,
            messages_marked=marked,
        )

    async def set_typing_status(
        self, user_id: str, conversation_id: int, is_typing: bool
    ) -> None:
        await ensure_participant(self.participant_repo, conversation_id, user_id)
        try:
            self.realtime.publish_typing(conversation_id, user_id, is_typing)
        except Exception as e:
            logger.warning(
                "realtime_publish_failed", conversation_id=conversation_id, error=str(e)
            )
