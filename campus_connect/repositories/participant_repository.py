from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from campus_connect.models.api.participants import ParticipantResponse
from campus_connect.models.api.users import UserSummary
from campus_connect.models.db.participant_model import ParticipantModel
from campus_connect.models.db.user_model import UserModel
from campus_connect.repositories.base_repository import BaseRepository


class ParticipantRepository(BaseRepository[ParticipantModel, ParticipantResponse]):
    """Repository for participant operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, ParticipantModel)

    async def is_participant(self, conversation_id: int, user_id: str) -> bool:
        """Membership check used to authorize every conversation operation."""
        query = (
            select(self.model_class.id)
            .where(
                self.model_class.conversation_id == conversation_id,
                self.model_class.user_id == user_id,
            )
            .limit(1)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none() is not None

    async def add_participants(
        self, conversation_id: int, user_ids: Sequence[str], now: datetime
    ) -> List[ParticipantResponse]:
        """Stage one participant row per user in a single flush."""
        return await self.add_all(
            [
                ParticipantModel(
                    conversation_id=conversation_id, user_id=user_id, last_read=now
                )
                for user_id in user_ids
            ]
        )

    async def get_other_participant(
        self, conversation_id: int, user_id: str
    ) -> Optional[UserSummary]:
        others = await self.get_other_participants([conversation_id], user_id)
        return others.get(conversation_id)

    async def get_other_participants(
        self, conversation_ids: Sequence[int], user_id: str
    ) -> Dict[int, UserSummary]:
        """Map each conversation to the participant who is not `user_id`."""
        if not conversation_ids:
            return {}
        query = (
            select(self.model_class.conversation_id, UserModel)
            .join(UserModel, UserModel.id == self.model_class.user_id)
            .where(
                self.model_class.conversation_id.in_(conversation_ids),
                self.model_class.user_id != user_id,
            )
        )
        result = await self.db.execute(query)
        return {
            conversation_id: UserSummary(
                id=user.id, name=user.name, image=user.image
            )
            for conversation_id, user in result.all()
        }

    async def mark_read(
        self, conversation_id: int, user_id: str, read_at: datetime
    ) -> None:
        await self.db.execute(
            update(self.model_class)
            .where(
                self.model_class.conversation_id == conversation_id,
                self.model_class.user_id == user_id,
            )
            .values(last_read=read_at)
        )

    def _to_pydantic(self, db_model: Any) -> ParticipantResponse:
        """Convert SQLAlchemy ParticipantModel to Pydantic ParticipantResponse."""
        return ParticipantResponse(
            id=db_model.id,
            conversation_id=db_model.conversation_id,
            user_id=db_model.user_id,
            last_read=db_model.last_read,
        )
