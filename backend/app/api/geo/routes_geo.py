"""Location lookup routes for the report form."""
from fastapi import APIRouter, Depends, Query

from app.api.deps import get_current_user, get_geocoding_client
from app.domain.users.models import User
from app.infra.vendors.geocoding import GeocodingClient

router = APIRouter()


@router.get("/reverse")
async def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    current_user: User = Depends(get_current_user),
    geocoder: GeocodingClient = Depends(get_geocoding_client),
):
    """Address for the device position; coordinates when the lookup fails."""
    return {"address": await geocoder.reverse(lat, lon)}


@router.get("/search")
async def search_places(
    q: str = "",
    current_user: User = Depends(get_current_user),
    geocoder: GeocodingClient = Depends(get_geocoding_client),
):
    """Place suggestions for at least 3 typed characters."""
    return {"suggestions": await geocoder.search(q)}
