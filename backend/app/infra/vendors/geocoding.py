"""Reverse geocoding and place search against a Nominatim-compatible API."""
import httpx
import logging
from typing import Optional
from app.settings import settings

logger = logging.getLogger(__name__)

# Address parts joined for reverse lookups, most specific first
ADDRESS_PARTS = ("road", "neighbourhood", "suburb", "city", "state", "country")
MIN_QUERY_LENGTH = 3


def format_coordinates(lat: float, lon: float) -> str:
    return f"{lat:.4f}, {lon:.4f}"


def build_address(result: dict) -> str:
    """Comma-joined address from the detailed parts. Falls back to display_name when that is too short."""
    address = result.get("address") or {}
    parts = [address[p] for p in ADDRESS_PARTS if address.get(p)]
    joined = ", ".join(parts)
    if len(joined) > 10:
        return joined
    return result.get("display_name") or ""


class GeocodingClient:
    """Client for the geocoding service. Failures never propagate: callers get a fallback."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.geocoder_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.geocoder_timeout_seconds
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
            headers={"User-Agent": settings.geocoder_user_agent, "Accept-Language": "en"},
        )

    async def reverse(self, lat: float, lon: float) -> str:
        """
        Human-readable address for a coordinate.

        Returns:
            str: address, display_name, or "lat, lon" (4 decimals) when the lookup fails
        """
        params = {"format": "json", "lat": lat, "lon": lon, "zoom": 18, "addressdetails": 1}
        try:
            async with self._client() as client:
                response = await client.get("/reverse", params=params)
                response.raise_for_status()
                result = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"⚠️ [GEO] Reverse geocoding failed for {lat},{lon}: {e}")
            return format_coordinates(lat, lon)

        address = build_address(result) if isinstance(result, dict) else ""
        return address or format_coordinates(lat, lon)

    async def search(self, query: str, limit: Optional[int] = None) -> list[str]:
        """Place suggestions (display names) restricted to the configured countries."""
        query = (query or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            return []
        params = {
            "format": "json",
            "q": query,
            "limit": limit or settings.geocoder_search_limit,
            "addressdetails": 1,
        }
        countries = settings.geocoder_country_codes_list
        if countries:
            params["countrycodes"] = ",".join(countries)
        try:
            async with self._client() as client:
                response = await client.get("/search", params=params)
                response.raise_for_status()
                results = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"⚠️ [GEO] Place search failed for {query!r}: {e}")
            return []

        if not isinstance(results, list):
            return []
        return [r["display_name"] for r in results if isinstance(r, dict) and r.get("display_name")]
