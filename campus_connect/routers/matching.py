from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect.auth import get_current_user_id
from campus_connect.database import get_db
from campus_connect.models.api.matching import CandidateResult, SwipeRequest, SwipeResult
from campus_connect.services.matching_service import MatchingService

router = APIRouter()


@router.get("/candidate", response_model=CandidateResult)
async def get_next_candidate(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> CandidateResult:
    """Next user the caller has not swiped on, or NO_MORE_CANDIDATES."""
    service = MatchingService(db)
    return await service.get_next_candidate(user_id)


@router.post("/swipes", response_model=SwipeResult)
async def swipe(
    request: SwipeRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> SwipeResult:
    """Record a left/right decision; MATCH when the other user already swiped right."""
    service = MatchingService(db)
    return await service.swipe(user_id, request.swiped_user_id, request.direction)
