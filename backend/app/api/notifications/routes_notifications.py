"""Notification API routes. Clients poll /unread on the interval from /config/client."""
from datetime import datetime
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict
from typing import List

from app.api.deps import get_current_user, get_notification_service
from app.domain.users.models import User
from app.services.notification_service import NotificationService

router = APIRouter()


class NotificationResponse(BaseModel):
    """Notification response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    message: str
    is_read: bool
    created_at: datetime


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    limit: int = Query(50, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service),
):
    """List notifications for the current user, newest first."""
    return await notifications.list_notifications(current_user.id, limit=limit)


@router.get("/unread", response_model=List[NotificationResponse])
async def list_unread_notifications(
    current_user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service),
):
    """Unread notifications, newest first."""
    return await notifications.get_unread_notifications(current_user.id)


@router.get("/unread-count")
async def get_unread_count(
    current_user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service),
):
    """Return unread notification count for the current user."""
    return {"unread": await notifications.count_unread(current_user.id)}


@router.patch("/{notification_id}/read")
async def mark_notification_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service),
):
    """Mark a notification as read. 404 when it is missing or not yours."""
    await notifications.mark_notification_as_read(notification_id, current_user.id)
    return {"ok": True}


@router.post("/read-all")
async def mark_all_notifications_read(
    current_user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service),
):
    """Mark all notifications as read for the current user."""
    count = await notifications.mark_all_read(current_user.id)
    return {"ok": True, "updated": count}
