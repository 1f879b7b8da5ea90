from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import case, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from campus_connect.models.api.conversations import ConversationResponse
from campus_connect.models.db.conversation_model import ConversationModel
from campus_connect.models.db.participant_model import ParticipantModel
from campus_connect.repositories.base_repository import BaseRepository


class ConversationRepository(BaseRepository[ConversationModel, ConversationResponse]):
    """Repository for conversation operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, ConversationModel)

    async def find_by_pair(self, user_a: str, user_b: str) -> Optional[int]:
        """Find the conversation whose participant set is exactly {user_a, user_b}."""
        pair = [user_a, user_b]
        conversations_of_a = select(ParticipantModel.conversation_id).where(
            ParticipantModel.user_id == user_a
        )
        query = (
            select(ParticipantModel.conversation_id)
            .where(ParticipantModel.conversation_id.in_(conversations_of_a))
            .group_by(ParticipantModel.conversation_id)
            .having(func.count(ParticipantModel.id) == 2)
            .having(
                func.sum(case((ParticipantModel.user_id.in_(pair), 1), else_=0)) == 2
            )
            .order_by(ParticipantModel.conversation_id)
            .limit(1)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def create_empty(self, now: datetime) -> ConversationResponse:
        """Stage a new conversation row without participants."""
        return await self.add(ConversationModel(created_at=now, updated_at=now))

    async def lock_for_update(self, conversation_id: int) -> None:
        """Hold the conversation row until commit so its writes are serialized."""
        await self.db.execute(
            select(self.model_class.id)
            .where(self.model_class.id == conversation_id)
            .with_for_update()
        )

    async def touch(self, conversation_id: int, updated_at: datetime) -> None:
        """Record new activity; concurrent writers are last-writer-wins."""
        await self.db.execute(
            update(self.model_class)
            .where(self.model_class.id == conversation_id)
            .values(updated_at=updated_at)
        )

    async def list_for_user(self, user_id: str) -> List[ConversationResponse]:
        """Conversations of a user, most recently active first."""
        query = (
            select(self.model_class)
            .join(
                ParticipantModel,
                ParticipantModel.conversation_id == self.model_class.id,
            )
            .where(ParticipantModel.user_id == user_id)
            .order_by(self.model_class.updated_at.desc(), self.model_class.id.desc())
        )
        result = await self.db.execute(query)
        return [self._to_pydantic(db_model) for db_model in result.scalars().all()]

    def _to_pydantic(self, db_model: Any) -> ConversationResponse:
        """Convert SQLAlchemy ConversationModel to Pydantic ConversationResponse."""
        return ConversationResponse(
            id=db_model.id,
            created_at=db_model.created_at,
            updated_at=db_model.updated_at,
        )
