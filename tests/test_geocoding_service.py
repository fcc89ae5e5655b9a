"""Tests for the geocoding service (Google and Nominatim providers)."""

import httpx
import pytest

from services.geocoding import GeocodingError, GeocodingService


def _service(handler, **kwargs):
    kwargs.setdefault("user_agent", "fostertoys-tests")
    return GeocodingService(transport=httpx.MockTransport(handler), **kwargs)


@pytest.mark.asyncio
async def test_nominatim_returns_first_match():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        seen["user_agent"] = request.headers.get("user-agent")
        return httpx.Response(200, json=[
            {"lat": "38.5816", "lon": "-121.4944", "display_name": "Sacramento, California"},
            {"lat": "0", "lon": "0", "display_name": "Elsewhere"},
        ])

    result = await _service(handler, provider="nominatim").geocode("  Sacramento, CA  ")

    assert result.latitude == pytest.approx(38.5816)
    assert result.longitude == pytest.approx(-121.4944)
    assert result.formatted_address == "Sacramento, California"
    assert seen["params"]["q"] == "Sacramento, CA"
    assert seen["params"]["limit"] == "1"
    assert seen["user_agent"] == "fostertoys-tests"


@pytest.mark.asyncio
async def test_nominatim_no_results_is_an_error():
    service = _service(lambda request: httpx.Response(200, json=[]), provider="nominatim")

    with pytest.raises(GeocodingError, match="no results"):
        await service.geocode("invalid-unresolvable-address-xyz")


@pytest.mark.asyncio
async def test_google_returns_location():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["key"] == "test-key"
        return httpx.Response(200, json={
            "status": "OK",
            "results": [{
                "formatted_address": "Sacramento, CA 95814, USA",
                "geometry": {"location": {"lat": 38.58, "lng": -121.49}},
            }],
        })

    result = await _service(handler, provider="google", google_api_key="test-key").geocode("95814")

    assert (result.latitude, result.longitude) == (38.58, -121.49)
    assert result.formatted_address == "Sacramento, CA 95814, USA"


@pytest.mark.asyncio
async def test_google_zero_results_is_an_error():
    service = _service(
        lambda request: httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []}),
        provider="google",
        google_api_key="test-key",
    )

    with pytest.raises(GeocodingError, match="ZERO_RESULTS"):
        await service.geocode("nowhere")


@pytest.mark.asyncio
async def test_google_without_api_key_fails_without_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={})

    service = _service(handler, provider="google", google_api_key="")
    with pytest.raises(GeocodingError, match="GOOGLE_MAPS_API_KEY"):
        await service.geocode("95814")
    assert calls == []


@pytest.mark.asyncio
async def test_http_error_status_is_an_error():
    service = _service(lambda request: httpx.Response(503), provider="nominatim")

    with pytest.raises(GeocodingError, match="HTTP 503"):
        await service.geocode("95814")


@pytest.mark.asyncio
async def test_timeout_is_an_error():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(GeocodingError, match="timed out"):
        await _service(handler, provider="nominatim").geocode("95814")


@pytest.mark.asyncio
async def test_provider_override_and_validation():
    service = _service(lambda request: httpx.Response(200, json=[]), provider="nominatim")

    with pytest.raises(GeocodingError, match="Unsupported"):
        await service.geocode("95814", provider="mapquest")
    with pytest.raises(GeocodingError, match="required"):
        await service.geocode("   ")
