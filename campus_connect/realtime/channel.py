"""Realtime delivery of conversation events.

Publishing never blocks the caller and never raises: persisted state is
authoritative and subscribers refetch on every notification.
"""

import asyncio
from datetime import datetime
from typing import Any, Dict, Optional, Set, Tuple

import httpx
from pusher.errors import PusherError

from campus_connect import config
from campus_connect.clients.base_push_client import BasePushClient
from campus_connect.clients.pusher_client import PusherClient
from campus_connect.logging_config import get_logger
from campus_connect.models.api.messages import MessageResponse
from campus_connect.realtime.broker import (
    MESSAGES_READ_EVENT,
    NEW_MESSAGE_EVENT,
    TYPING_STATUS_EVENT,
    RealtimeBroker,
    Subscription,
    conversation_topic,
    typing_topic,
)

logger = get_logger(__name__)

PushJob = Tuple[str, str, Dict[str, Any]]


class RealtimeChannel:
    """Topic-per-conversation notifications, optionally mirrored to a push service."""

    def __init__(
        self,
        broker: Optional[RealtimeBroker] = None,
        push_client: Optional[BasePushClient] = None,
        push_queue_size: int = 1000,
    ):
        self.broker = broker or RealtimeBroker(config.REALTIME_QUEUE_SIZE)
        self.push_client = push_client
        self._push_queue_size = push_queue_size
        self._push_queue: Optional["asyncio.Queue[PushJob]"] = None
        self._push_worker: Optional["asyncio.Task[None]"] = None

    def publish(self, conversation_id: int, message: MessageResponse) -> None:
        """Announce a newly persisted message on the conversation topic."""
        self._emit(
            conversation_topic(conversation_id),
            NEW_MESSAGE_EVENT,
            message.model_dump(mode="json"),
        )

    def publish_read(
        self, conversation_id: int, user_id: str, last_read: datetime
    ) -> None:
        self._emit(
            conversation_topic(conversation_id),
            MESSAGES_READ_EVENT,
            {"user_id": user_id, "last_read": last_read.isoformat()},
        )

    def publish_typing(self, conversation_id: int, user_id: str, is_typing: bool) -> None:
        self._emit(
            typing_topic(conversation_id),
            TYPING_STATUS_EVENT,
            {"user_id": user_id, "is_typing": is_typing},
        )

    def subscribe(self, conversation_id: int, include_typing: bool = False) -> Subscription:
        topics = [conversation_topic(conversation_id)]
        if include_typing:
            topics.append(typing_topic(conversation_id))
        return self.broker.subscribe(*topics)

    def _emit(self, topic: str, event: str, data: Dict[str, Any]) -> None:
        delivered = self.broker.publish(topic, event, data)
        logger.debug(
            "realtime_published", topic=topic, event_name=event, delivered=delivered
        )
        if self.push_client is not None:
            self._enqueue_push((topic, event, data))

    def _enqueue_push(self, job: PushJob) -> None:
        if self._push_queue is None:
            self._push_queue = asyncio.Queue(maxsize=self._push_queue_size)
        if self._push_worker is None or self._push_worker.done():
            self._push_worker = asyncio.create_task(self._run_push_worker())
        try:
            self._push_queue.put_nowait(job)
        except asyncio.QueueFull:
            logger.warning("realtime_push_dropped", topic=job[0], event_name=job[1])

    async def _run_push_worker(self) -> None:
        """Forward queued events to the push service one at a time, in order."""
        assert self._push_queue is not None and self.push_client is not None
        while True:
            topic, event, data = await self._push_queue.get()
            try:
                await self.push_client.trigger(topic, event, data)
            except (httpx.HTTPError, PusherError, OSError, ValueError) as e:
                logger.warning(
                    "realtime_push_failed", topic=topic, event_name=event, error=str(e)
                )
            finally:
                self._push_queue.task_done()

    async def drain(self) -> None:
        """Wait until every queued push has been attempted."""
        if self._push_queue is not None and self._push_worker is not None:
            await self._push_queue.join()

    async def aclose(self) -> None:
        if self._push_worker is not None:
            self._push_worker.cancel()
            try:
                await self._push_worker
            except asyncio.CancelledError:
                pass
            self._push_worker = None
        if self.push_client is not None:
            await self.push_client.aclose()


def build_realtime_channel() -> RealtimeChannel:
    """Channel wired from configuration."""
    push_client: Optional[BasePushClient] = None
    if config.pusher_configured():
        push_client = PusherClient(
            base_url=config.PUSHER_URL or "",
            app_id=config.PUSHER_APP_ID or "",
            key=config.PUSHER_KEY or "",
            secret=config.PUSHER_SECRET or "",
        )
    return RealtimeChannel(RealtimeBroker(config.REALTIME_QUEUE_SIZE), push_client)


_channel: Optional[RealtimeChannel] = None


def get_realtime_channel() -> RealtimeChannel:
    """Process-wide channel, also usable as a FastAPI dependency."""
    global _channel
    if _channel is None:
        _channel = build_realtime_channel()
    return _channel


async def close_realtime_channel() -> None:
    global _channel
    if _channel is not None:
        await _channel.aclose()
        _channel = None
