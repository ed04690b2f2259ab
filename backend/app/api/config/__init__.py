"""Client config API."""
from fastapi import APIRouter

from app.api.config import routes_config

router = APIRouter()

router.include_router(routes_config.router, prefix="/config", tags=["config"])
