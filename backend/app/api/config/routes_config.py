"""Settings the browser needs (polling interval, page size, upload limit)."""
from fastapi import APIRouter

from app.settings import settings

router = APIRouter()


@router.get("/client")
async def get_client_config():
    return {
        "notification_poll_interval_seconds": settings.notification_poll_interval_seconds,
        "tasks_page_size": settings.tasks_page_size,
        "max_image_bytes": settings.max_image_bytes,
        "report_points": settings.report_points,
        "websocket_path": f"{settings.api_v1_prefix}/ws/events",
    }
