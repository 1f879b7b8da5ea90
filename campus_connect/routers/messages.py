from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect.auth import get_current_user_id
from campus_connect.database import get_db
from campus_connect.models.api.messages import MessageResponse, SendMessageRequest
from campus_connect.realtime.channel import RealtimeChannel, get_realtime_channel
from campus_connect.services.send_message_service import SendMessageService

router = APIRouter()


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    request: SendMessageRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    realtime: RealtimeChannel = Depends(get_realtime_channel),
) -> MessageResponse:
    """Send a message to a conversation the caller participates in."""
    service = SendMessageService(db, realtime)
    return await service.send_message(user_id, request.conversation_id, request.content)
