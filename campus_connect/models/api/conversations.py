from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .messages import MessageResponse
from .users import UserSummary


class CreateConversationRequest(BaseModel):
    """Request model for starting a conversation."""

    other_user_id: str = Field(..., min_length=1, description="User to talk to")


class ConversationCreated(BaseModel):
    id: int


class ConversationResponse(BaseModel):
    """Response model for conversation data."""

    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConversationSummary(BaseModel):
    """One row of the caller's inbox."""

    conversation: ConversationResponse
    other_participant: Optional[UserSummary]
    last_message: Optional[MessageResponse] = None
    unread_count: int = 0


class ConversationDetail(BaseModel):
    conversation: ConversationResponse
    other_participant: Optional[UserSummary]


class TypingStatusRequest(BaseModel):
    is_typing: bool


class ReadReceipt(BaseModel):
    conversation_id: int
    user_id: str
    last_read: datetime
    messages_marked: int
