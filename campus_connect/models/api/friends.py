from typing import Optional

from pydantic import BaseModel

from .users import ProfileSummary


class FriendUser(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None


class FriendResponse(BaseModel):
    """A friend and the public part of their profile."""

    user: FriendUser
    profile: Optional[ProfileSummary] = None
