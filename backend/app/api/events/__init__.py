"""Realtime events API."""
from fastapi import APIRouter

from app.api.events import routes_ws

router = APIRouter()

router.include_router(routes_ws.router, prefix="/ws", tags=["events"])
