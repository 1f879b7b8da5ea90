from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect import config
from campus_connect.errors import ValidationFailedError
from campus_connect.models.api.messages import MessagesPage
from campus_connect.repositories.message_repository import MessageRepository
from campus_connect.repositories.participant_repository import ParticipantRepository
from campus_connect.services.membership import ensure_participant


class GetConversationMessagesService:
    """Service for retrieving messages from a specific conversation."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.participant_repo = ParticipantRepository(db)
        self.message_repo = MessageRepository(db)

    async def get_conversation_messages(
        self,
        user_id: str,
        conversation_id: int,
        limit: Optional[int] = None,
        cursor: Optional[int] = None,
    ) -> MessagesPage:
        """
        Get one page of messages for a conversation:

        1. Validate paging parameters
        2. Verify the caller participates
        3. Fetch the newest `limit` messages older than `cursor`, ascending
        """
        if limit is None:
            limit = config.DEFAULT_PAGE_SIZE
        if limit <= 0 or limit > config.MAX_PAGE_SIZE:
            raise ValidationFailedError(
                f"Limit must be between 1 and {config.MAX_PAGE_SIZE}"
            )
        if cursor is not None and cursor <= 0:
            raise ValidationFailedError("Cursor must be a positive message id")

        await ensure_participant(self.participant_repo, conversation_id, user_id)

        messages = await self.message_repo.get_page(conversation_id, limit, cursor)

        # A full page means older messages may remain
        next_cursor = messages[0].id if len(messages) == limit else None
        return MessagesPage(messages=messages, next_cursor=next_cursor)
