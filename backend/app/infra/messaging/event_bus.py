"""In-process typed event bus.

Services publish after their unit of work commits. Delivery is best-effort and
at-most-once: a subscriber that raises is logged and skipped, and clients that
are not listening catch up on their next fetch.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from app.domain.common.types import generate_id, utcnow

logger = logging.getLogger(__name__)

# Identifies this process when events are fanned out through Redis
INSTANCE_ID = generate_id()


class EventType(str, Enum):
    """Event types."""
    REPORT_SUBMITTED = "report.submitted"
    BALANCE_UPDATED = "balance.updated"
    NOTIFICATION_CREATED = "notification.created"
    TASK_UPDATED = "task.updated"


@dataclass
class Event:
    """A typed event. user_id None means every connected client is interested."""
    type: EventType
    payload: Dict[str, Any]
    user_id: Optional[int] = None
    id: str = field(default_factory=generate_id)
    origin: str = INSTANCE_ID
    created_at: datetime = field(default_factory=utcnow)

    def to_message(self) -> dict:
        """Wire shape sent to WebSocket clients."""
        return {"type": self.type.value, "payload": self.payload}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "payload": self.payload,
            "user_id": self.user_id,
            "origin": self.origin,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Event":
        return cls(
            type=EventType(data["type"]),
            payload=data.get("payload") or {},
            user_id=data.get("user_id"),
            id=data.get("id") or generate_id(),
            origin=data.get("origin") or "",
            created_at=datetime.fromisoformat(data["created_at"]) if data.get("created_at") else utcnow(),
        )


Subscriber = Callable[[Event], Awaitable[None]]


class EventBus:
    """Per-type subscriber lists, plus catch-all subscribers (event_type=None)."""

    def __init__(self):
        self._subscribers: Dict[Optional[EventType], List[Subscriber]] = defaultdict(list)

    def subscribe(self, event_type: Optional[EventType], handler: Subscriber) -> None:
        """Register a handler for one event type, or for all types when event_type is None."""
        if handler not in self._subscribers[event_type]:
            self._subscribers[event_type].append(handler)

    def unsubscribe(self, event_type: Optional[EventType], handler: Subscriber) -> None:
        handlers = self._subscribers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def clear(self) -> None:
        self._subscribers.clear()

    async def publish(self, event: Event) -> int:
        """Deliver to every subscriber. Returns how many handlers ran without error."""
        handlers = list(self._subscribers.get(event.type, ())) + list(self._subscribers.get(None, ()))
        delivered = 0
        for handler in handlers:
            try:
                await handler(event)
                delivered += 1
            except Exception as e:
                logger.warning(
                    f"⚠️ [EVENTS] Subscriber {getattr(handler, '__name__', handler)} failed for {event.type.value}: {e}",
                    exc_info=True,
                )
        logger.debug(f"📣 [EVENTS] {event.type.value} delivered to {delivered}/{len(handlers)} subscribers")
        return delivered

    async def emit(self, event_type: EventType, payload: Dict[str, Any], user_id: Optional[int] = None) -> int:
        """Shorthand for publish(Event(...))."""
        return await self.publish(Event(type=event_type, payload=payload, user_id=user_id))


# Global instance
event_bus = EventBus()
