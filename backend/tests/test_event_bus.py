"""Tests for the event bus and WebSocket fan-out."""
import pytest

from app.infra.messaging.event_bus import Event, EventBus, EventType
from app.infra.realtime.ws_manager import WebSocketSessionManager


class FakeSocket:
    def __init__(self, broken=False):
        self.sent = []
        self.broken = broken
        self.accepted = False

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(message)


@pytest.mark.asyncio
async def test_typed_and_catch_all_subscribers():
    bus = EventBus()
    typed, everything = [], []

    async def on_balance(event):
        typed.append(event)

    async def on_any(event):
        everything.append(event)

    bus.subscribe(EventType.BALANCE_UPDATED, on_balance)
    bus.subscribe(None, on_any)

    await bus.emit(EventType.BALANCE_UPDATED, {"balance": 3}, user_id=1)
    await bus.emit(EventType.TASK_UPDATED, {"id": 9})

    assert [e.payload for e in typed] == [{"balance": 3}]
    assert [e.type for e in everything] == [EventType.BALANCE_UPDATED, EventType.TASK_UPDATED]


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_block_others():
    bus = EventBus()
    received = []

    async def broken(event):
        raise ValueError("boom")

    async def working(event):
        received.append(event)

    bus.subscribe(None, broken)
    bus.subscribe(None, working)

    delivered = await bus.emit(EventType.REPORT_SUBMITTED, {"id": 1})

    assert delivered == 1
    assert len(received) == 1


@pytest.mark.asyncio
async def test_unsubscribe():
    bus = EventBus()
    received = []

    async def handler(event):
        received.append(event)

    bus.subscribe(EventType.TASK_UPDATED, handler)
    bus.unsubscribe(EventType.TASK_UPDATED, handler)

    assert await bus.emit(EventType.TASK_UPDATED, {}) == 0
    assert received == []


def test_event_from_dict_keeps_origin():
    event = Event(type=EventType.NOTIFICATION_CREATED, payload={"id": 4}, user_id=2, origin="other-node")

    restored = Event.from_dict(event.to_dict())

    assert restored.id == event.id
    assert restored.user_id == 2
    assert restored.origin == "other-node"
    assert restored.to_message() == {"type": "notification.created", "payload": {"id": 4}}


@pytest.mark.asyncio
async def test_forward_event_targets_user_or_everyone():
    manager = WebSocketSessionManager()
    alice, bob = FakeSocket(), FakeSocket()
    await manager.connect(1, alice)
    await manager.connect(2, bob)

    await manager.forward_event(Event(type=EventType.BALANCE_UPDATED, payload={"balance": 5}, user_id=1))
    await manager.forward_event(Event(type=EventType.REPORT_SUBMITTED, payload={"id": 7}))

    assert alice.accepted
    assert alice.sent == [
        {"type": "balance.updated", "payload": {"balance": 5}},
        {"type": "report.submitted", "payload": {"id": 7}},
    ]
    assert bob.sent == [{"type": "report.submitted", "payload": {"id": 7}}]


@pytest.mark.asyncio
async def test_closed_sockets_are_dropped():
    manager = WebSocketSessionManager()
    await manager.connect(1, FakeSocket(broken=True), already_accepted=True)
    healthy = FakeSocket()
    await manager.connect(1, healthy, already_accepted=True)

    sent = await manager.send_to_user(1, {"type": "ping"})

    assert sent == 1
    assert manager.connection_count == 1
    assert await manager.send_to_user(42, {"type": "ping"}) == 0


def test_websocket_handshake_and_ping():
    from starlette.testclient import TestClient

    from app.infra.security.jwt import create_access_token
    from app.main import app

    client = TestClient(app)
    token = create_access_token({"sub": 5})

    with client.websocket_connect(f"/v1/ws/events?token={token}") as websocket:
        assert websocket.receive_json() == {"type": "connection.established", "payload": {"user_id": 5}}
        websocket.send_text("ping")
        assert websocket.receive_text() == "pong"


def test_websocket_rejects_bad_token():
    from starlette.testclient import TestClient
    from starlette.websockets import WebSocketDisconnect

    from app.main import app

    client = TestClient(app)

    with client.websocket_connect("/v1/ws/events?token=nope") as websocket:
        with pytest.raises(WebSocketDisconnect) as exc:
            websocket.receive_json()
    assert exc.value.code == 1008
