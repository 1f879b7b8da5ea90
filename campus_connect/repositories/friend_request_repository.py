from datetime import datetime
from typing import Any, List

from pydantic import BaseModel, ConfigDict
from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from campus_connect.models.db.friend_request_model import FriendRequestModel
from campus_connect.repositories.base_repository import BaseRepository


class FriendRequestRecord(BaseModel):
    id: int
    sender_id: str
    receiver_id: str
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FriendRequestRepository(BaseRepository[FriendRequestModel, FriendRequestRecord]):
    """Repository for friend links."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, FriendRequestModel)

    async def are_linked(self, user_a: str, user_b: str) -> bool:
        """Whether an accepted link exists between the two users in either direction."""
        query = (
            select(self.model_class.id)
            .where(
                self.model_class.status == "accepted",
                or_(
                    (self.model_class.sender_id == user_a)
                    & (self.model_class.receiver_id == user_b),
                    (self.model_class.sender_id == user_b)
                    & (self.model_class.receiver_id == user_a),
                ),
            )
            .limit(1)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none() is not None

    async def create_accepted_pair(
        self, user_a: str, user_b: str, now: datetime
    ) -> List[FriendRequestRecord]:
        """Stage the two symmetric accepted rows that materialize a match."""
        return await self.add_all(
            [
                FriendRequestModel(
                    sender_id=user_a, receiver_id=user_b, status="accepted", created_at=now
                ),
                FriendRequestModel(
                    sender_id=user_b, receiver_id=user_a, status="accepted", created_at=now
                ),
            ]
        )

    async def get_friend_ids(self, user_id: str) -> List[str]:
        """Distinct users linked to `user_id` by an accepted request, oldest first."""
        query = (
            select(self.model_class.sender_id, self.model_class.receiver_id)
            .where(
                self.model_class.status == "accepted",
                or_(
                    self.model_class.sender_id == user_id,
                    self.model_class.receiver_id == user_id,
                ),
            )
            .order_by(self.model_class.id)
        )
        result = await self.db.execute(query)
        friend_ids: List[str] = []
        for sender_id, receiver_id in result.all():
            other = receiver_id if sender_id == user_id else sender_id
            if other not in friend_ids:
                friend_ids.append(other)
        return friend_ids

    def _to_pydantic(self, db_model: Any) -> FriendRequestRecord:
        return FriendRequestRecord.model_validate(db_model)
