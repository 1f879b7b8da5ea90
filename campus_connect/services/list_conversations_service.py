from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect.errors import NotFoundError
from campus_connect.models.api.conversations import (
    ConversationDetail,
    ConversationSummary,
)
from campus_connect.repositories.conversation_repository import ConversationRepository
from campus_connect.repositories.message_repository import MessageRepository
from campus_connect.repositories.participant_repository import ParticipantRepository
from campus_connect.services.membership import ensure_participant


class ListConversationsService:
    """Service for the caller's inbox and single-conversation headers."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.conversation_repo = ConversationRepository(db)
        self.participant_repo = ParticipantRepository(db)
        self.message_repo = MessageRepository(db)

    async def list_conversations(self, user_id: str) -> List[ConversationSummary]:
        """
        List the user's conversations, most recently active first:

        1. Load the user's conversations ordered by updated_at
        2. Resolve the other participant of each
        3. Attach the latest message and unread count
        """
        conversations = await self.conversation_repo.list_for_user(user_id)
        conversation_ids = [conversation.id for conversation in conversations]

        others = await self.participant_repo.get_other_participants(
            conversation_ids, user_id
        )
        latest = await self.message_repo.get_latest_by_conversations(conversation_ids)
        unread = await self.message_repo.count_unread(user_id, conversation_ids)

        return [
            ConversationSummary(
                conversation=conversation,
                other_participant=others.get(conversation.id),
                last_message=latest.get(conversation.id),
                unread_count=unread.get(conversation.id, 0),
            )
            for conversation in conversations
        ]

    async def get_conversation(
        self, user_id: str, conversation_id: int
    ) -> ConversationDetail:
        """Conversation header with the other participant's public info."""
        await ensure_participant(self.participant_repo, conversation_id, user_id)

        conversation = await self.conversation_repo.get_by_id(conversation_id)
        if not conversation:
            raise NotFoundError(
                "Conversation not found", details={"conversation_id": conversation_id}
            )
        other = await self.participant_repo.get_other_participant(
            conversation_id, user_id
        )
        return ConversationDetail(conversation=conversation, other_participant=other)
