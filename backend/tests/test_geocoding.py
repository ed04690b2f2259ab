"""Tests for the geocoding client, using httpx.MockTransport."""
import httpx
import pytest

from app.infra.vendors.geocoding import GeocodingClient, build_address, format_coordinates


def client_for(handler):
    return GeocodingClient(base_url="https://geo.example.com", timeout=1, transport=httpx.MockTransport(handler))


def test_build_address_prefers_detailed_parts():
    result = {
        "display_name": "Somewhere long and verbose",
        "address": {"road": "MG Road", "city": "Bengaluru", "country": "India", "postcode": "560001"},
    }
    assert build_address(result) == "MG Road, Bengaluru, India"


def test_build_address_falls_back_to_display_name():
    assert build_address({"display_name": "Tiny Town", "address": {"city": "Oz"}}) == "Tiny Town"


@pytest.mark.asyncio
async def test_reverse_lookup():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"address": {"road": "Baker Street", "city": "London"}})

    address = await client_for(handler).reverse(51.5237, -0.1585)

    assert address == "Baker Street, London"
    assert seen["path"] == "/reverse"
    assert seen["params"]["zoom"] == "18"
    assert seen["params"]["addressdetails"] == "1"


@pytest.mark.asyncio
async def test_reverse_falls_back_to_coordinates():
    def handler(request):
        return httpx.Response(503)

    assert await client_for(handler).reverse(12.345678, 45.678912) == "12.3457, 45.6789"
    assert format_coordinates(1, 2) == "1.0000, 2.0000"


@pytest.mark.asyncio
async def test_search_restricts_countries():
    seen = {}

    def handler(request):
        seen.update(dict(request.url.params))
        return httpx.Response(200, json=[{"display_name": "Central Park, New York"}, {"name": "no display"}])

    suggestions = await client_for(handler).search("central park", limit=3)

    assert suggestions == ["Central Park, New York"]
    assert seen["countrycodes"] == "in,us,gb,ca,au"
    assert seen["limit"] == "3"


@pytest.mark.asyncio
async def test_short_or_failing_search_returns_nothing():
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectError("offline", request=request)

    client = client_for(handler)

    assert await client.search("ab") == []
    assert calls == []
    assert await client.search("abbey road") == []
    assert len(calls) == 1
