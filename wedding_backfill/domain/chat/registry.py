"""
Conversation event registry - in-process publish/subscribe for chat notifications.

One registry is created per process and handed to the request handlers.
Events are fanned out to the subscribers that are connected right now;
nothing is persisted or replayed (the message store is the source of truth).
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Sentinel pushed to a queue when its subscription is closed
CLOSED = None


@dataclass(eq=False)
class Subscription:
    """One open event stream for a (user, conversation) pair"""

    id: int
    user_id: str
    conversation_id: str
    queue: asyncio.Queue = field(default_factory=asyncio.Queue)
    closed: bool = False

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.queue.put_nowait(CLOSED)

    async def next_event(self, timeout: Optional[float] = None) -> Optional[dict]:
        """Next event, or None once closed (or on timeout)"""
        if self.closed and self.queue.empty():
            return None
        try:
            if timeout is None:
                return await self.queue.get()
            return await asyncio.wait_for(self.queue.get(), timeout)
        except asyncio.TimeoutError:
            return None


class ConversationEventRegistry:
    """At most one active subscription per (user, conversation)"""

    def __init__(self):
        self._subscriptions: dict[tuple[str, str], Subscription] = {}
        self._ids = itertools.count(1)

    def subscribe(self, conversation_id: str, user_id: str) -> Subscription:
        key = (user_id, conversation_id)
        previous = self._subscriptions.get(key)
        if previous is not None:
            logger.info(f"🔁 Replacing event stream of user {user_id} on {conversation_id}")
            previous.close()

        subscription = Subscription(
            id=next(self._ids), user_id=user_id, conversation_id=conversation_id
        )
        self._subscriptions[key] = subscription
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        key = (subscription.user_id, subscription.conversation_id)
        # A newer stream may already own the key
        if self._subscriptions.get(key) is subscription:
            del self._subscriptions[key]
        subscription.close()

    def publish(self, conversation_id: str, payload: dict[str, Any], event_type: str = "new_message") -> int:
        """Queue an event for every open subscription of the conversation; returns how many"""
        event = {"type": event_type, **payload}
        delivered = 0
        for subscription in list(self._subscriptions.values()):
            if subscription.conversation_id != conversation_id or subscription.closed:
                continue
            subscription.queue.put_nowait(event)
            delivered += 1
        logger.debug(f"📨 {event_type} on {conversation_id} -> {delivered} subscriber(s)")
        return delivered

    def active_count(self, conversation_id: Optional[str] = None) -> int:
        if conversation_id is None:
            return len(self._subscriptions)
        return sum(1 for s in self._subscriptions.values() if s.conversation_id == conversation_id)
