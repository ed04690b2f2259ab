"""Redis fan-out for events, so every API instance can reach its own WebSocket clients."""
import asyncio
import json
import logging
from typing import Awaitable, Callable, Optional

import redis.asyncio as redis

from app.infra.messaging.event_bus import INSTANCE_ID, Event, EventBus
from app.settings import settings

logger = logging.getLogger(__name__)


class RedisBus:
    """Redis pub/sub wrapper."""

    def __init__(self):
        self._redis: Optional[redis.Redis] = None

    async def connect(self):
        """Connect to Redis."""
        self._redis = redis.from_url(settings.redis_url, decode_responses=True)

    async def disconnect(self):
        """Disconnect from Redis."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    async def ping(self) -> bool:
        if not self._redis:
            await self.connect()
        return bool(await self._redis.ping())

    async def publish(self, channel: str, message: dict):
        """Publish a message to a channel."""
        if not self._redis:
            await self.connect()
        await self._redis.publish(channel, json.dumps(message))

    async def subscribe_forever(
        self, channel: str, handler: Callable[[dict], Awaitable[None]]
    ) -> None:
        """Subscribe to a channel and call handler for each message. Runs until cancelled."""
        if not self._redis:
            await self.connect()
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(channel)
        try:
            while True:
                msg = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
                if msg and msg.get("type") == "message" and msg.get("data"):
                    try:
                        data = json.loads(msg["data"])
                        await handler(data)
                    except Exception as e:
                        logger.warning(f"⚠️ [EVENTS] Dropped Redis message on {channel}: {e}")
        except asyncio.CancelledError:
            pass
        finally:
            await pubsub.unsubscribe(channel)
            await pubsub.aclose()


class RedisEventBridge:
    """Forwards locally published events to Redis and replays remote ones on the local bus."""

    def __init__(self, bus: EventBus, redis_bus: RedisBus, channel: str):
        self.bus = bus
        self.redis_bus = redis_bus
        self.channel = channel
        self._task: Optional[asyncio.Task] = None

    async def forward(self, event: Event) -> None:
        # Only events raised in this process go out; remote ones came from Redis already
        if event.origin != INSTANCE_ID:
            return
        await self.redis_bus.publish(self.channel, event.to_dict())

    async def _on_remote(self, data: dict) -> None:
        event = Event.from_dict(data)
        if event.origin == INSTANCE_ID:
            return
        await self.bus.publish(event)

    def start(self) -> None:
        self.bus.subscribe(None, self.forward)
        self._task = asyncio.create_task(self.redis_bus.subscribe_forever(self.channel, self._on_remote))
        logger.info(f"✅ [EVENTS] Redis fan-out on channel {self.channel}")

    async def stop(self) -> None:
        self.bus.unsubscribe(None, self.forward)
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        await self.redis_bus.disconnect()


# Global instance
redis_bus = RedisBus()
