import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect import config
from campus_connect.database import get_db
from campus_connect.logging_config import get_logger
from campus_connect.realtime.broker import Subscription
from campus_connect.realtime.channel import RealtimeChannel, get_realtime_channel
from campus_connect.repositories.participant_repository import ParticipantRepository

router = APIRouter()
logger = get_logger(__name__)

WS_CLOSE_UNAUTHENTICATED = 4401
WS_CLOSE_FORBIDDEN = 4403


@router.websocket("/conversations/{conversation_id}/ws")
async def conversation_events(
    websocket: WebSocket,
    conversation_id: int,
    db: AsyncSession = Depends(get_db),
    channel: RealtimeChannel = Depends(get_realtime_channel),
) -> None:
    """
    Stream a conversation's events to a participant.

    The caller is identified by the identity header only; query parameters
    are not trusted.

    Each frame is {"topic", "event", "data"}. Frames are hints: clients refetch
    messages over HTTP after a new-message event.
    """
    caller = websocket.headers.get(config.USER_ID_HEADER)
    if not caller:
        await websocket.close(code=WS_CLOSE_UNAUTHENTICATED)
        return

    allowed = await ParticipantRepository(db).is_participant(conversation_id, caller)
    # Do not hold a pooled connection for the lifetime of the socket
    await db.close()
    if not allowed:
        logger.info(
            "realtime_ws_forbidden", conversation_id=conversation_id, user_id=caller
        )
        await websocket.close(code=WS_CLOSE_FORBIDDEN)
        return

    # Subscribe before accepting so nothing published after the handshake is missed
    subscription = channel.subscribe(conversation_id, include_typing=True)
    forwarder: Optional["asyncio.Task[None]"] = None
    try:
        await websocket.accept()
        forwarder = asyncio.create_task(_forward(websocket, subscription))
        logger.info(
            "realtime_ws_connected", conversation_id=conversation_id, user_id=caller
        )
        while True:
            # Client frames are not used; reading detects the disconnect
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        subscription.unsubscribe()
        if forwarder is not None:
            forwarder.cancel()
            try:
                await forwarder
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.warning(
                    "realtime_ws_send_failed",
                    conversation_id=conversation_id,
                    error=str(e),
                )
        logger.info(
            "realtime_ws_disconnected", conversation_id=conversation_id, user_id=caller
        )


async def _forward(websocket: WebSocket, subscription: Subscription) -> None:
    async for event in subscription:
        await websocket.send_json(event.to_dict())
