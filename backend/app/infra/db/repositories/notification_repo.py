"""Notification repository."""
from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func

from app.infra.db.models.notification import NotificationModel


class NotificationRepository:
    """Notification repository."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user_id: int, type: str, message: str) -> NotificationModel:
        """Create a notification."""
        model = NotificationModel(user_id=user_id, type=type, message=message, is_read=False)
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return model

    async def list_by_user(
        self, user_id: int, limit: int = 50, unread_only: bool = False
    ) -> List[NotificationModel]:
        """List notifications for a user, newest first."""
        q = select(NotificationModel).where(NotificationModel.user_id == user_id)
        if unread_only:
            q = q.where(NotificationModel.is_read.is_(False))
        q = q.order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc()).limit(limit)
        result = await self.session.execute(q)
        return list(result.scalars().all())

    async def count_unread(self, user_id: int) -> int:
        """Count unread notifications for a user."""
        result = await self.session.execute(
            select(func.count()).select_from(NotificationModel).where(
                NotificationModel.user_id == user_id,
                NotificationModel.is_read.is_(False),
            )
        )
        return result.scalar() or 0

    async def get(self, notification_id: int, user_id: int) -> Optional[NotificationModel]:
        """Get a notification by ID if it belongs to the user."""
        result = await self.session.execute(
            select(NotificationModel).where(
                NotificationModel.id == notification_id,
                NotificationModel.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def mark_read(self, notification_id: int, user_id: int) -> bool:
        """Mark a notification as read. Returns True if found and updated."""
        result = await self.session.execute(
            update(NotificationModel)
            .where(
                NotificationModel.id == notification_id,
                NotificationModel.user_id == user_id,
            )
            .values(is_read=True)
        )
        return result.rowcount > 0

    async def mark_all_read(self, user_id: int) -> int:
        """Mark all unread notifications as read. Returns count updated."""
        result = await self.session.execute(
            update(NotificationModel)
            .where(NotificationModel.user_id == user_id, NotificationModel.is_read.is_(False))
            .values(is_read=True)
        )
        return result.rowcount or 0
