from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect.database import lock_user_pair
from campus_connect.errors import (
    PERSISTENCE_ERRORS,
    NotFoundError,
    ValidationFailedError,
    persistence_error,
)
from campus_connect.logging_config import get_logger
from campus_connect.repositories.conversation_repository import ConversationRepository
from campus_connect.repositories.participant_repository import ParticipantRepository
from campus_connect.repositories.user_repository import UserRepository

logger = get_logger(__name__)


class CreateConversationService:
    """Service for starting (or resuming) a two-party conversation."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.conversation_repo = ConversationRepository(db)
        self.participant_repo = ParticipantRepository(db)
        self.user_repo = UserRepository(db)

    async def get_or_create_conversation(
        self, requester_id: str, other_user_id: str
    ) -> int:
        """
        Return the id of the conversation between the two users:

        1. Validate the pair and resolve the other user
        2. Lock the pair so concurrent callers cannot both create
        3. Return the existing conversation, or create it with both participants
        """
        if requester_id == other_user_id:
            raise ValidationFailedError("Cannot start a conversation with yourself")
        if not await self.user_repo.exists(other_user_id):
            raise NotFoundError("User not found", details={"user_id": other_user_id})

        try:
            await lock_user_pair(self.db, "conversation", requester_id, other_user_id)

            existing_id = await self.conversation_repo.find_by_pair(
                requester_id, other_user_id
            )
            if existing_id is not None:
                # Releases the advisory lock
                await self.db.rollback()
                return existing_id

            now = datetime.now(timezone.utc)
            conversation = await self.conversation_repo.create_empty(now)
            await self.participant_repo.add_participants(
                conversation.id, [requester_id, other_user_id], now
            )
            await self.db.commit()
        except PERSISTENCE_ERRORS as e:
            await self.db.rollback()
            logger.error(
                "conversation_create_failed",
                requester_id=requester_id,
                other_user_id=other_user_id,
                error=str(e),
            )
            raise persistence_error(e, "Failed to create conversation") from e

        logger.info(
            "conversation_created",
            conversation_id=conversation.id,
            requester_id=requester_id,
            other_user_id=other_user_id,
        )
        return conversation.id
