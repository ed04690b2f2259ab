"""WebSocket connection manager for event delivery."""
import logging
from typing import Dict, Set

from fastapi import WebSocket

from app.infra.messaging.event_bus import Event

logger = logging.getLogger(__name__)


class WebSocketSessionManager:
    """Tracks open event sockets per user."""

    def __init__(self):
        # user_id -> open sockets (one per tab/device)
        self.user_sockets: Dict[int, Set[WebSocket]] = {}

    async def connect(self, user_id: int, websocket: WebSocket, already_accepted: bool = False) -> None:
        """Register a socket for a user."""
        if not already_accepted:
            await websocket.accept()
        self.user_sockets.setdefault(user_id, set()).add(websocket)
        logger.info(f"🔌 [WEBSOCKET] User {user_id} connected ({len(self.user_sockets[user_id])} sockets)")

    async def disconnect(self, user_id: int, websocket: WebSocket) -> None:
        """Forget a socket."""
        sockets = self.user_sockets.get(user_id)
        if sockets is None:
            return
        sockets.discard(websocket)
        if not sockets:
            del self.user_sockets[user_id]

    @property
    def connection_count(self) -> int:
        return sum(len(s) for s in self.user_sockets.values())

    async def send_to_user(self, user_id: int, message: dict) -> int:
        """Send a message to every socket of a user. Returns sockets reached."""
        sockets = self.user_sockets.get(user_id)
        if not sockets:
            logger.debug(f"[WEBSOCKET] User {user_id} has no open sockets, dropping {message.get('type', 'unknown')}")
            return 0
        sent = 0
        disconnected = []
        for websocket in sockets.copy():
            try:
                await websocket.send_json(message)
                sent += 1
            except (RuntimeError, ConnectionError) as e:
                logger.warning(f"⚠️ [WEBSOCKET] Connection closed for user {user_id}: {e}")
                disconnected.append(websocket)
            except Exception as e:
                logger.error(f"❌ [WEBSOCKET] Failed to send to user {user_id}: {e}")
                disconnected.append(websocket)
        for ws in disconnected:
            await self.disconnect(user_id, ws)
        return sent

    async def broadcast(self, message: dict) -> int:
        """Send a message to every connected user."""
        sent = 0
        for user_id in list(self.user_sockets):
            sent += await self.send_to_user(user_id, message)
        return sent

    async def forward_event(self, event: Event) -> None:
        """Event bus subscriber: user-scoped events to that user, the rest to everyone."""
        message = event.to_message()
        if event.user_id is not None:
            await self.send_to_user(event.user_id, message)
        else:
            await self.broadcast(message)


# Global instance
ws_manager = WebSocketSessionManager()
