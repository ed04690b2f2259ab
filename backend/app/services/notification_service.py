"""
Notification inbox and delivery.

deliver_notification() is the one entry point for "tell this user something":
it writes the inbox row, commits, then publishes notification.created so an
open WebSocket can update the bell without waiting for the next poll.
"""
import logging
from typing import Any, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.common.errors import NotFoundError
from app.infra.db.models.notification import NotificationModel
from app.infra.db.repositories.notification_repo import NotificationRepository
from app.infra.db.session import unit_of_work
from app.infra.messaging.event_bus import EventBus, EventType, event_bus

logger = logging.getLogger(__name__)


def notification_payload(notif: NotificationModel) -> dict[str, Any]:
    """Client representation of a notification."""
    ts_ms = int(notif.created_at.timestamp() * 1000) if notif.created_at else 0
    return {
        "id": notif.id,
        "type": notif.type,
        "message": notif.message,
        "is_read": notif.is_read,
        "created_at": notif.created_at.isoformat() if notif.created_at else None,
        "timestamp": ts_ms,
    }


class NotificationService:
    """Notification inbox operations for one session."""

    def __init__(self, session: AsyncSession, events: Optional[EventBus] = None):
        self.session = session
        self.repo = NotificationRepository(session)
        self.events = events or event_bus

    async def create_notification(self, user_id: int, message: str, type: str) -> NotificationModel:
        """Write an unread notification without committing (callers fold it into their unit of work)."""
        return await self.repo.create(user_id=user_id, type=type, message=message)

    async def publish_created(self, notif: NotificationModel) -> None:
        await self.events.emit(EventType.NOTIFICATION_CREATED, notification_payload(notif), user_id=notif.user_id)

    async def get_unread_notifications(self, user_id: int) -> List[NotificationModel]:
        return await self.repo.list_by_user(user_id, unread_only=True)

    async def list_notifications(self, user_id: int, limit: int = 50) -> List[NotificationModel]:
        return await self.repo.list_by_user(user_id, limit=limit)

    async def count_unread(self, user_id: int) -> int:
        return await self.repo.count_unread(user_id)

    async def mark_notification_as_read(self, notification_id: int, user_id: int) -> None:
        """Mark one of the user's notifications read. Another user's id is reported as missing."""
        async with unit_of_work(self.session):
            updated = await self.repo.mark_read(notification_id, user_id)
            if not updated:
                raise NotFoundError("Notification", str(notification_id))

    async def mark_all_read(self, user_id: int) -> int:
        async with unit_of_work(self.session):
            return await self.repo.mark_all_read(user_id)


async def deliver_notification(
    session: AsyncSession,
    user_id: int,
    type: str,
    message: str,
    *,
    events: Optional[EventBus] = None,
) -> NotificationModel:
    """
    Create the inbox row, commit, and publish notification.created.

    Args:
        session: DB session; committed here.
        user_id: Recipient user id.
        type: Notification type (e.g. reward, system).
        message: Body shown in the inbox.

    Returns:
        The created NotificationModel.
    """
    service = NotificationService(session, events=events)
    async with unit_of_work(session):
        notif = await service.create_notification(user_id, message, type)
    await service.publish_created(notif)
    logger.info("Notification %s delivered to user %s", notif.id, user_id)
    return notif
