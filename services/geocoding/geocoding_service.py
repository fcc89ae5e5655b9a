"""
Geocoding Service - Address to Coordinates Conversion
Supports the Google Geocoding API (keyed) and OpenStreetMap Nominatim (free).
"""
import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel

from modules.config import ConfigEnv

logger = logging.getLogger(__name__)

GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"

SUPPORTED_PROVIDERS = ("google", "nominatim")


class GeocodingError(Exception):
    """The address could not be resolved (provider error, timeout or no match)."""


class GeocodeResult(BaseModel):
    latitude: float
    longitude: float
    formatted_address: Optional[str] = None


class GeocodingService:
    """Service for converting free-text addresses to coordinates."""

    def __init__(
        self,
        provider: Optional[str] = None,
        google_api_key: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            provider: Default provider ("google" or "nominatim").
            google_api_key: API key for the Google provider.
            user_agent: User-Agent sent to Nominatim (required by its usage policy).
            timeout: Request timeout in seconds; a timeout is a geocoding failure.
            transport: Optional httpx transport (used by tests).
        """
        self.provider = (provider or ConfigEnv.GEOCODER_PROVIDER or "nominatim").lower()
        self.google_api_key = google_api_key if google_api_key is not None else ConfigEnv.GOOGLE_MAPS_API_KEY
        self.user_agent = user_agent or ConfigEnv.GEOCODER_USER_AGENT
        self.timeout = timeout or ConfigEnv.GEOCODER_TIMEOUT_SECONDS
        self._transport = transport

        if self.provider == "google" and not self.google_api_key:
            logger.warning("GOOGLE_MAPS_API_KEY not set - google geocoding will not work")

    async def geocode(self, address: str, provider: Optional[str] = None) -> GeocodeResult:
        """
        Convert an address to coordinates (forward geocoding).

        Args:
            address: Free text to resolve (street address, city, postal code...)
            provider: Override the configured provider for this call

        Returns:
            GeocodeResult with latitude, longitude and the provider's formatted address.

        Raises:
            GeocodingError: empty input, unsupported provider, missing API key,
                HTTP failure, timeout or no results.
        """
        if not address or not address.strip():
            raise GeocodingError("Address is required for geocoding")

        selected = (provider or self.provider).lower()
        if selected == "google":
            return await self._geocode_with_google(address.strip())
        if selected == "nominatim":
            return await self._geocode_with_nominatim(address.strip())
        raise GeocodingError(f"Unsupported geocoding provider: {selected}")

    async def _get_json(self, url: str, params: dict, headers: Optional[dict] = None) -> Any:
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.get(url, params=params, headers=headers)
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException as e:
            logger.error(f"Geocoding API timeout after {self.timeout}s")
            raise GeocodingError("Geocoding request timed out") from e
        except httpx.HTTPStatusError as e:
            logger.error(f"Geocoding API HTTP error: {e.response.status_code}")
            raise GeocodingError(f"Geocoding failed: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Geocoding API request error: {e}")
            raise GeocodingError(f"Geocoding request failed: {e}") from e
        except ValueError as e:
            raise GeocodingError("Geocoding failed: invalid JSON response") from e

    async def _geocode_with_google(self, address: str) -> GeocodeResult:
        if not self.google_api_key:
            raise GeocodingError("GOOGLE_MAPS_API_KEY is not configured")

        data = await self._get_json(
            GOOGLE_GEOCODE_URL,
            params={"address": address, "key": self.google_api_key},
        )
        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(data, dict) or data.get("status") != "OK" or not results:
            api_status = data.get("status") if isinstance(data, dict) else None
            raise GeocodingError(f"Geocoding failed: {api_status or 'unknown status'}")

        best_match = results[0]
        try:
            location = best_match["geometry"]["location"]
            return GeocodeResult(
                latitude=float(location["lat"]),
                longitude=float(location["lng"]),
                formatted_address=best_match.get("formatted_address"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise GeocodingError("Geocoding failed: malformed provider response") from e

    async def _geocode_with_nominatim(self, address: str) -> GeocodeResult:
        data = await self._get_json(
            NOMINATIM_SEARCH_URL,
            params={"q": address, "format": "json", "limit": 1, "addressdetails": 1},
            headers={"User-Agent": self.user_agent, "Accept": "application/json"},
        )
        if not isinstance(data, list) or not data:
            logger.info(f"No geocoding results for address: {address}")
            raise GeocodingError("Geocoding failed: no results found")

        best_match = data[0]
        try:
            return GeocodeResult(
                latitude=float(best_match["lat"]),
                longitude=float(best_match["lon"]),
                formatted_address=best_match.get("display_name"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise GeocodingError("Geocoding failed: malformed provider response") from e
