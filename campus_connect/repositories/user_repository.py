from typing import Any, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from campus_connect.models.api.friends import FriendResponse, FriendUser
from campus_connect.models.api.matching import Candidate
from campus_connect.models.api.users import ProfileSummary, UserSummary
from campus_connect.models.db.user_model import ProfileModel, UserModel
from campus_connect.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[UserModel, UserSummary]):
    """Read-only access to identities owned by the identity service."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, UserModel)

    async def find_candidate(self, user_id: str, excluded: Any) -> Optional[Candidate]:
        """First user other than `user_id` whose id is not in `excluded`.

        No ranking: whichever row the database yields first.
        """
        query = (
            select(self.model_class, ProfileModel)
            .outerjoin(ProfileModel, ProfileModel.user_id == self.model_class.id)
            .where(
                self.model_class.id != user_id,
                self.model_class.id.not_in(excluded),
            )
            .limit(1)
        )
        result = await self.db.execute(query)
        row = result.first()
        if row is None:
            return None
        user, profile = row
        return Candidate(
            user=self._to_pydantic(user),
            profile=ProfileSummary.model_validate(profile) if profile else None,
        )

    async def get_with_profiles(self, user_ids: Sequence[str]) -> List[FriendResponse]:
        """Users with their profile subset, in the order of `user_ids`."""
        if not user_ids:
            return []
        query = (
            select(self.model_class, ProfileModel)
            .outerjoin(ProfileModel, ProfileModel.user_id == self.model_class.id)
            .where(self.model_class.id.in_(user_ids))
        )
        result = await self.db.execute(query)
        by_id = {
            user.id: FriendResponse(
                user=FriendUser(
                    id=user.id, name=user.name, email=user.email, image=user.image
                ),
                profile=ProfileSummary(
                    bio=profile.bio,
                    major=profile.major,
                    graduation_year=profile.graduation_year,
                )
                if profile
                else None,
            )
            for user, profile in result.all()
        }
        return [by_id[user_id] for user_id in user_ids if user_id in by_id]

    def _to_pydantic(self, db_model: Any) -> UserSummary:
        return UserSummary(id=db_model.id, name=db_model.name, image=db_model.image)
