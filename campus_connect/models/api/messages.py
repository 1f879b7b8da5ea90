from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

MessageStatus = Literal["sent", "delivered", "read"]


class SendMessageRequest(BaseModel):
    """Request model for sending a message."""

    conversation_id: int = Field(..., description="Target conversation")
    content: str = Field(..., description="Message text")


class MessageResponse(BaseModel):
    """Response model for message data."""

    id: int
    conversation_id: int
    sender_id: str
    content: str
    created_at: datetime
    status: MessageStatus
    sender_image: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class MessagesPage(BaseModel):
    """Messages in ascending order plus the cursor for the next older page."""

    messages: List[MessageResponse]
    next_cursor: Optional[int] = None
