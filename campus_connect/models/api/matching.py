from typing import Literal, Optional

from pydantic import BaseModel, Field

from .users import ProfileSummary, UserSummary

SwipeDirection = Literal["left", "right"]


class Candidate(BaseModel):
    user: UserSummary
    profile: Optional[ProfileSummary] = None


class CandidateResult(BaseModel):
    """Next unseen user, or the exhaustion signal."""

    status: Literal["SUCCESS", "NO_MORE_CANDIDATES"]
    candidate: Optional[Candidate] = None


class SwipeRequest(BaseModel):
    """Request model for a swipe decision."""

    swiped_user_id: str = Field(..., min_length=1, description="User being swiped on")
    direction: SwipeDirection


class SwipeResult(BaseModel):
    status: Literal["MATCH", "NO_MATCH"]
    matched_user_id: Optional[str] = None


class SwipeResponse(BaseModel):
    id: int
    swiper_id: str
    swiped_id: str
    direction: SwipeDirection
