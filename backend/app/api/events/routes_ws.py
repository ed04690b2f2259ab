"""WebSocket route forwarding bus events (report.submitted, balance.updated, ...) to the browser."""
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from app.infra.realtime.ws_manager import ws_manager
from app.infra.security.jwt import user_id_from_token

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/events")
async def websocket_events(
    websocket: WebSocket,
    token: str | None = None,
):
    """Events for the authenticated user plus broadcast events. Send "ping" to get "pong"."""
    await websocket.accept()

    user_id = user_id_from_token(token or websocket.query_params.get("token") or "", "access")
    if user_id is None:
        logger.warning("⚠️ [WEBSOCKET] Connection rejected: missing or invalid token")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Invalid token")
        return

    await ws_manager.connect(user_id, websocket, already_accepted=True)
    try:
        await websocket.send_json({"type": "connection.established", "payload": {"user_id": user_id}})
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    except (RuntimeError, ConnectionError) as e:
        logger.warning(f"⚠️ [WEBSOCKET] Connection error for user {user_id}: {e}")
    finally:
        await ws_manager.disconnect(user_id, websocket)
