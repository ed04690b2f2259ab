"""Geocoding API."""
from fastapi import APIRouter

from app.api.geo import routes_geo

router = APIRouter()

router.include_router(routes_geo.router, prefix="/geo", tags=["geo"])
