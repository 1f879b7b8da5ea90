from typing import Optional

from pydantic import BaseModel, ConfigDict


class UserSummary(BaseModel):
    """Public identity of a user."""

    id: str
    name: Optional[str] = None
    image: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ProfileSummary(BaseModel):
    """Subset of profile fields shown next to a candidate or friend."""

    bio: Optional[str] = None
    major: Optional[str] = None
    graduation_year: Optional[int] = None
    university: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
