"""In-process topic publish/subscribe.

Every subscription owns a bounded FIFO queue. All publishing happens on the
application's event loop, so events of one topic reach each subscriber in
publish order. Delivery is at-most-once: a subscriber whose queue is full
misses the event.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, Optional, Set, Tuple

from campus_connect.logging_config import get_logger

logger = get_logger(__name__)

NEW_MESSAGE_EVENT = "new-message"
TYPING_STATUS_EVENT = "typing-status"
MESSAGES_READ_EVENT = "messages-read"


def conversation_topic(conversation_id: int) -> str:
    return f"chat-{conversation_id}"


def typing_topic(conversation_id: int) -> str:
    return f"chat-{conversation_id}-typing"


@dataclass(frozen=True)
class RealtimeEvent:
    topic: str
    event: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"topic": self.topic, "event": self.event, "data": self.data}


_CLOSED = object()


class Subscription:
    """A live stream of events for one or more topics."""

    def __init__(self, broker: "RealtimeBroker", topics: Tuple[str, ...], max_queue: int):
        self.topics = topics
        self._broker = broker
        self._queue: "asyncio.Queue[Any]" = asyncio.Queue(maxsize=max_queue + 1)
        self._max_queue = max_queue
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def deliver(self, event: RealtimeEvent) -> bool:
        """Enqueue without waiting; False if closed or full."""
        if self._closed or self._queue.qsize() >= self._max_queue:
            return False
        self._queue.put_nowait(event)
        return True

    async def get(self, timeout: Optional[float] = None) -> Optional[RealtimeEvent]:
        """Next event, or None once unsubscribed."""
        if self._closed and self._queue.empty():
            return None
        if timeout is None:
            item = await self._queue.get()
        else:
            item = await asyncio.wait_for(self._queue.get(), timeout)
        if item is _CLOSED:
            return None
        return item

    def unsubscribe(self) -> None:
        """Stop receiving events. Safe to call any number of times."""
        if self._closed:
            return
        self._closed = True
        self._broker._remove(self)
        # One slot is reserved so the sentinel always fits
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> AsyncIterator[RealtimeEvent]:
        return self

    async def __anext__(self) -> RealtimeEvent:
        event = await self.get()
        if event is None:
            raise StopAsyncIteration
        return event

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.unsubscribe()


class RealtimeBroker:
    """Fan-out of events to the subscribers of a topic."""

    def __init__(self, max_queue_size: int = 100):
        self.max_queue_size = max_queue_size
        self._subscribers: Dict[str, Set[Subscription]] = {}

    def subscribe(self, *topics: str) -> Subscription:
        if not topics:
            raise ValueError("At least one topic is required")
        subscription = Subscription(self, tuple(topics), self.max_queue_size)
        for topic in topics:
            self._subscribers.setdefault(topic, set()).add(subscription)
        logger.debug("realtime_subscribed", topics=list(topics))
        return subscription

    def publish(self, topic: str, event: str, data: Dict[str, Any]) -> int:
        """Deliver to every current subscriber of `topic`; returns how many got it."""
        realtime_event = RealtimeEvent(topic=topic, event=event, data=data)
        delivered = 0
        for subscription in list(self._subscribers.get(topic, ())):
            if subscription.deliver(realtime_event):
                delivered += 1
            else:
                logger.warning("realtime_event_dropped", topic=topic, event_name=event)
        return delivered

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, ()))

    def _remove(self, subscription: Subscription) -> None:
        for topic in subscription.topics:
            subscribers = self._subscribers.get(topic)
            if subscribers is None:
                continue
            subscribers.discard(subscription)
            if not subscribers:
                del self._subscribers[topic]
