"""Collection tasks API."""
from fastapi import APIRouter

from app.api.tasks import routes_tasks

router = APIRouter()

router.include_router(routes_tasks.router, prefix="/tasks", tags=["tasks"])
