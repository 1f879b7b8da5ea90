from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect.database import lock_user_pair
from campus_connect.errors import (
    PERSISTENCE_ERRORS,
    ConflictError,
    NotFoundError,
    ValidationFailedError,
    persistence_error,
)
from campus_connect.logging_config import get_logger
from campus_connect.models.api.matching import CandidateResult, SwipeResult
from campus_connect.models.db.swipe_model import SWIPE_DIRECTIONS
from campus_connect.repositories.friend_request_repository import (
    FriendRequestRepository,
)
from campus_connect.repositories.swipe_repository import SwipeRepository
from campus_connect.repositories.user_repository import UserRepository

logger = get_logger(__name__)


class MatchingService:
    """Swipe-based matching between users."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.swipe_repo = SwipeRepository(db)
        self.friend_repo = FriendRequestRepository(db)
        self.user_repo = UserRepository(db)

    async def get_next_candidate(self, user_id: str) -> CandidateResult:
        """One user the caller has not swiped on yet, in no particular order."""
        candidate = await self.user_repo.find_candidate(
            user_id, excluded=self.swipe_repo.swiped_ids_query(user_id)
        )
        if candidate is None:
            return CandidateResult(status="NO_MORE_CANDIDATES")
        return CandidateResult(status="SUCCESS", candidate=candidate)

    async def swipe(self, swiper_id: str, swiped_id: str, direction: str) -> SwipeResult:
        """
        Record a swipe and report whether it completed a match:

        1. Validate the target and direction
        2. Lock the unordered pair so mutual swipes cannot race
        3. Reject a repeat swipe on the same target
        4. Insert the swipe, then check for the reciprocal right swipe
        5. On a match, insert both accepted friend links in the same commit
        """
        if direction not in SWIPE_DIRECTIONS:
            raise ValidationFailedError(
                "Direction must be 'left' or 'right'", details={"direction": direction}
            )
        if swiper_id == swiped_id:
            raise ValidationFailedError("Cannot swipe on yourself")
        if not await self.user_repo.exists(swiped_id):
            raise NotFoundError("User not found", details={"user_id": swiped_id})

        matched = False
        try:
            await lock_user_pair(self.db, "swipe", swiper_id, swiped_id)

            if await self.swipe_repo.get_swipe(swiper_id, swiped_id) is not None:
                await self.db.rollback()
                raise ConflictError(
                    "Already swiped on this user", details={"user_id": swiped_id}
                )

            now = datetime.now(timezone.utc)
            await self.swipe_repo.create_swipe(swiper_id, swiped_id, direction, now)

            if direction == "right" and await self.swipe_repo.has_swiped_right(
                swiped_id, swiper_id
            ):
                matched = True
                if not await self.friend_repo.are_linked(swiper_id, swiped_id):
                    await self.friend_repo.create_accepted_pair(
                        swiper_id, swiped_id, now
                    )

            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError(
                "Already swiped on this user", details={"user_id": swiped_id}
            ) from e
        except PERSISTENCE_ERRORS as e:
            await self.db.rollback()
            logger.error(
                "swipe_failed", swiper_id=swiper_id, swiped_id=swiped_id, error=str(e)
            )
            raise persistence_error(e, "Failed to record swipe") from e

        if matched:
            logger.info("swipe_matched", swiper_id=swiper_id, swiped_id=swiped_id)
            return SwipeResult(status="MATCH", matched_user_id=swiped_id)
        return SwipeResult(status="NO_MATCH")
