from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect import config
from campus_connect.auth import get_current_user_id
from campus_connect.database import get_db
from campus_connect.models.api.conversations import (
    ConversationCreated,
    ConversationDetail,
    ConversationSummary,
    CreateConversationRequest,
    ReadReceipt,
    TypingStatusRequest,
)
from campus_connect.models.api.messages import MessagesPage
from campus_connect.realtime.channel import RealtimeChannel, get_realtime_channel
from campus_connect.services.conversation_activity_service import (
    ConversationActivityService,
)
from campus_connect.services.create_conversation_service import (
    CreateConversationService,
)
from campus_connect.services.get_conversation_messages_service import (
    GetConversationMessagesService,
)
from campus_connect.services.list_conversations_service import ListConversationsService

router = APIRouter()


@router.get("", response_model=List[ConversationSummary])
async def list_conversations(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> List[ConversationSummary]:
    """List the caller's conversations, most recently active first."""
    service = ListConversationsService(db)
    return await service.list_conversations(user_id)


@router.post("", response_model=ConversationCreated)
async def create_conversation(
    request: CreateConversationRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> ConversationCreated:
    """Return the conversation with another user, creating it on first contact."""
    service = CreateConversationService(db)
    conversation_id = await service.get_or_create_conversation(
        user_id, request.other_user_id
    )
    return ConversationCreated(id=conversation_id)


@router.get("/{conversation_id}", response_model=ConversationDetail)
async def get_conversation(
    conversation_id: int,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> ConversationDetail:
    """
    Get a conversation and the other participant's public info.

    Path parameters:
    - conversation_id: id of the conversation
    """
    service = ListConversationsService(db)
    return await service.get_conversation(user_id, conversation_id)


@router.get("/{conversation_id}/messages", response_model=MessagesPage)
async def get_conversation_messages(
    conversation_id: int,
    limit: int = Query(
        config.DEFAULT_PAGE_SIZE,
        description="Maximum number of messages to return",
        ge=1,
        le=config.MAX_PAGE_SIZE,
    ),
    cursor: Optional[int] = Query(
        None, description="Only return messages with an id below this one", ge=1
    ),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> MessagesPage:
    """
    Get one page of messages in ascending order.

    Query parameters:
    - limit: Maximum number of messages to return (default: 50, max: 100)
    - cursor: id of the oldest message already shown, to load older ones
    """
    service = GetConversationMessagesService(db)
    return await service.get_conversation_messages(
        user_id=user_id, conversation_id=conversation_id, limit=limit, cursor=cursor
    )


@router.post("/{conversation_id}/read", response_model=ReadReceipt)
async def mark_conversation_read(
    conversation_id: int,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    realtime: RealtimeChannel = Depends(get_realtime_channel),
) -> ReadReceipt:
    service = ConversationActivityService(db, realtime)
    return await service.mark_conversation_read(user_id, conversation_id)


@router.post("/{conversation_id}/typing", status_code=status.HTTP_204_NO_CONTENT)
async def set_typing_status(
    conversation_id: int,
    request: TypingStatusRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    realtime: RealtimeChannel = Depends(get_realtime_channel),
) -> Response:
    service = ConversationActivityService(db, realtime)
    await service.set_typing_status(user_id, conversation_id, request.is_typing)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
