from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect.models.api.friends import FriendResponse
from campus_connect.repositories.friend_request_repository import (
    FriendRequestRepository,
)
from campus_connect.repositories.user_repository import UserRepository


class FriendsService:
    """Service for listing a user's friends."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.friend_repo = FriendRequestRepository(db)
        self.user_repo = UserRepository(db)

    async def get_friends(self, user_id: str) -> List[FriendResponse]:
        """Users linked to `user_id` by an accepted friend request, with profiles.

        Unpaginated; friend lists are expected to stay small.
        """
        friend_ids = await self.friend_repo.get_friend_ids(user_id)
        return await self.user_repo.get_with_profiles(friend_ids)
