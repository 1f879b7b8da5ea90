from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import and_, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from campus_connect.models.api.messages import MessageResponse
from campus_connect.models.db.message_model import MessageModel
from campus_connect.models.db.participant_model import ParticipantModel
from campus_connect.models.db.user_model import UserModel
from campus_connect.repositories.base_repository import BaseRepository


class MessageRepository(BaseRepository[MessageModel, MessageResponse]):
    """Repository for message operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, MessageModel)

    async def create_message(
        self,
        conversation_id: int,
        sender_id: str,
        content: str,
        created_at: datetime,
    ) -> MessageResponse:
        """Stage a new message; the id is assigned on flush."""
        return await self.add(
            MessageModel(
                conversation_id=conversation_id,
                sender_id=sender_id,
                content=content,
                created_at=created_at,
                status="sent",
            )
        )

    async def get_page(
        self, conversation_id: int, limit: int, cursor: Optional[int] = None
    ) -> List[MessageResponse]:
        """Newest `limit` messages older than `cursor`, returned oldest first.

        Each message carries its sender's avatar from the users table.
        """
        query = (
            select(self.model_class, UserModel.image)
            .outerjoin(UserModel, UserModel.id == self.model_class.sender_id)
            .where(self.model_class.conversation_id == conversation_id)
        )
        if cursor is not None:
            query = query.where(self.model_class.id < cursor)
        query = query.order_by(self.model_class.id.desc()).limit(limit)

        result = await self.db.execute(query)
        rows = list(result.all())
        rows.reverse()
        return [
            self._to_pydantic(db_model, sender_image=image) for db_model, image in rows
        ]

    async def get_latest_by_conversations(
        self, conversation_ids: Sequence[int]
    ) -> Dict[int, MessageResponse]:
        """Most recent message of each conversation that has one."""
        if not conversation_ids:
            return {}
        latest_ids = (
            select(func.max(self.model_class.id))
            .where(self.model_class.conversation_id.in_(conversation_ids))
            .group_by(self.model_class.conversation_id)
        )
        query = (
            select(self.model_class, UserModel.image)
            .outerjoin(UserModel, UserModel.id == self.model_class.sender_id)
            .where(self.model_class.id.in_(latest_ids))
        )
        result = await self.db.execute(query)
        return {
            db_model.conversation_id: self._to_pydantic(db_model, sender_image=image)
            for db_model, image in result.all()
        }

    async def count_unread(
        self, user_id: str, conversation_ids: Sequence[int]
    ) -> Dict[int, int]:
        """Messages from others newer than the user's last_read, per conversation."""
        if not conversation_ids:
            return {}
        query = (
            select(self.model_class.conversation_id, func.count(self.model_class.id))
            .join(
                ParticipantModel,
                and_(
                    ParticipantModel.conversation_id
                    == self.model_class.conversation_id,
                    ParticipantModel.user_id == user_id,
                ),
            )
            .where(
                self.model_class.conversation_id.in_(conversation_ids),
                self.model_class.sender_id != user_id,
                self.model_class.created_at > ParticipantModel.last_read,
            )
            .group_by(self.model_class.conversation_id)
        )
        result = await self.db.execute(query)
        return {conversation_id: count for conversation_id, count in result.all()}

    async def mark_read(self, conversation_id: int, reader_id: str) -> int:
        """Mark every message the reader received in the conversation as read."""
        result = await self.db.execute(
            update(self.model_class)
            .where(
                self.model_class.conversation_id == conversation_id,
                self.model_class.sender_id != reader_id,
                self.model_class.status != "read",
            )
            .values(status="read")
        )
        return result.rowcount or 0

    def _to_pydantic(
        self, db_model: Any, sender_image: Optional[str] = None
    ) -> MessageResponse:
        """Convert SQLAlchemy MessageModel to Pydantic MessageResponse."""
        return MessageResponse(
            id=db_model.id,
            conversation_id=db_model.conversation_id,
            sender_id=db_model.sender_id,
            content=db_model.content,
            created_at=db_model.created_at,
            status=db_model.status,
            sender_image=sender_image,
        )
