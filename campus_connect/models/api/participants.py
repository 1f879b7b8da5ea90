from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ParticipantResponse(BaseModel):
    """Response model for participant data."""

    id: int
    conversation_id: int
    user_id: str
    last_read: datetime

    model_config = ConfigDict(from_attributes=True)
