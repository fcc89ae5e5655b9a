"""
Proximity search for partner agencies.

A query location is resolved from explicit coordinates or by geocoding an
address / postal code. Two passes then produce candidates:

* geo pass: spherical search against the agencies 2dsphere index
* postal pass: textual postal code matching, used when the geo pass finds
  nothing or the location could not be geocoded

Results are merged by id and ranked by distance in miles.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from db.schemas import SEARCHABLE_AGENCY_STATUSES
from services.geocoding import GeocodingError

from .distance import haversine_meters, meters_to_miles, miles_to_meters
from .store import AgencyStore, StoreQueryError

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_MILES = 30.0


class SearchInputError(Exception):
    """The query carries no usable location hint."""


class Geocoder(Protocol):
    async def geocode(self, address: str, provider: Optional[str] = None) -> Any:
        ...


def _parse_float(value: Any) -> Optional[float]:
    """Return a finite float, or None for missing/non-numeric input."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_postal_code(postal_code: str) -> str:
    """Drop hyphens/whitespace and keep the 5-digit US prefix ("95814-1234" -> "95814")."""
    return re.sub(r"[-\s]", "", postal_code.strip())[:5]


@dataclass
class SearchQuery:
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    postal_code: Optional[str] = None
    radius_miles: float = DEFAULT_RADIUS_MILES

    @classmethod
    def from_params(
        cls,
        latitude: Any = None,
        longitude: Any = None,
        radius_miles: Any = None,
        address: Optional[str] = None,
        postal_code: Optional[str] = None,
        default_radius_miles: float = DEFAULT_RADIUS_MILES,
    ) -> "SearchQuery":
        """Build a query from raw request parameters; non-numeric coordinates count as absent."""
        radius = default_radius_miles
        if radius_miles is not None and str(radius_miles).strip():
            radius = _parse_float(radius_miles)
            if radius is None or radius <= 0:
                raise SearchInputError("radiusMiles must be a positive number.")
        return cls(
            latitude=_parse_float(latitude),
            longitude=_parse_float(longitude),
            address=_clean_text(address),
            postal_code=_clean_text(postal_code),
            radius_miles=radius,
        )

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass
class ResolvedLocation:
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    geocoded: bool = False
    formatted_address: Optional[str] = None

    @property
    def usable(self) -> bool:
        return self.geocoded and self.latitude is not None and self.longitude is not None


@dataclass
class PassOutcome:
    """Agencies produced by one search pass; degraded marks a swallowed store failure."""

    agencies: List[Dict[str, Any]] = field(default_factory=list)
    degraded: bool = False
    reason: Optional[str] = None


@dataclass
class SearchResult:
    agencies: List[Dict[str, Any]]
    location: ResolvedLocation
    geo_pass: PassOutcome
    postal_pass: Optional[PassOutcome] = None

    @property
    def degraded(self) -> bool:
        """True when either pass lost results to a store failure."""
        return self.geo_pass.degraded or bool(self.postal_pass and self.postal_pass.degraded)


def _agency_coordinates(agency: Dict[str, Any]) -> Optional[Tuple[float, float]]:
    """Return (latitude, longitude) from a GeoJSON location, or None."""
    location = agency.get("location") or {}
    coordinates = location.get("coordinates") if isinstance(location, dict) else None
    if not isinstance(coordinates, (list, tuple)) or len(coordinates) != 2:
        return None
    lng, lat = _parse_float(coordinates[0]), _parse_float(coordinates[1])
    if lat is None or lng is None:
        return None
    return lat, lng


def _distance_sort_key(agency: Dict[str, Any]) -> float:
    distance = agency.get("distanceInMiles")
    if isinstance(distance, (int, float)) and not isinstance(distance, bool):
        return float(distance)
    return math.inf


class AgencySearchEngine:
    """Ranks search-eligible agencies around a query location."""

    def __init__(
        self,
        store: AgencyStore,
        geocoder: Geocoder,
        statuses: Sequence[str] = SEARCHABLE_AGENCY_STATUSES,
    ):
        self.store = store
        self.geocoder = geocoder
        self.statuses = tuple(statuses)

    async def search(self, query: SearchQuery) -> SearchResult:
        """
        Run both passes and return merged agencies sorted by distanceInMiles.

        Store failures in either pass are logged and reported through
        SearchResult.degraded; they never reach the caller.

        Raises:
            SearchInputError: no coordinates and no address/postal code, or the
                address cannot be geocoded and there is no postal code to fall back on.
        """
        location = await self._resolve_location(query)
        logger.info(
            f"Searching agencies near [{location.longitude}, {location.latitude}] "
            f"within {query.radius_miles} miles (postal code: {query.postal_code or 'N/A'})"
        )

        geo_pass = await self._geo_pass(location, query.radius_miles)

        postal_pass = None
        if query.postal_code and (not geo_pass.agencies or not location.geocoded):
            postal_pass = await self._postal_pass(query, location)

        agencies = self._merge(geo_pass, postal_pass)
        agencies.sort(key=_distance_sort_key)
        logger.info(f"Returning {len(agencies)} agencies total")

        return SearchResult(
            agencies=agencies,
            location=location,
            geo_pass=geo_pass,
            postal_pass=postal_pass,
        )

    async def _resolve_location(self, query: SearchQuery) -> ResolvedLocation:
        if query.has_coordinates:
            return ResolvedLocation(latitude=query.latitude, longitude=query.longitude, geocoded=True)

        text = query.address or query.postal_code
        if not text:
            raise SearchInputError(
                "Provide either latitude/longitude or an address/zip_code to geolocate."
            )

        try:
            result = await self.geocoder.geocode(text)
        except GeocodingError as e:
            logger.warning(f"Geocoding failed for {text!r}: {e}")
            if not query.postal_code:
                raise SearchInputError(
                    "Failed to geocode the provided address/zip code. "
                    "Please provide valid coordinates or try a different zip code."
                ) from e
            logger.info(f"Geocoding failed, will search by zip code only: {query.postal_code!r}")
            return ResolvedLocation(geocoded=False)

        logger.info(f"Geocoded {text!r} to coordinates: [{result.longitude}, {result.latitude}]")
        return ResolvedLocation(
            latitude=result.latitude,
            longitude=result.longitude,
            geocoded=True,
            formatted_address=getattr(result, "formatted_address", None),
        )

    async def _geo_pass(self, location: ResolvedLocation, radius_miles: float) -> PassOutcome:
        if not location.usable:
            return PassOutcome()
        try:
            agencies = await self.store.find_near(
                location.latitude,
                location.longitude,
                miles_to_meters(radius_miles),
                self.statuses,
            )
        except StoreQueryError as e:
            # Missing 2dsphere index and the like: continue with postal matching
            logger.warning(f"Error in geoNear search, continuing without geo results: {e}")
            return PassOutcome(degraded=True, reason=str(e))

        logger.info(f"Found {len(agencies)} agencies via geoNear search")
        return PassOutcome(agencies=list(agencies))

    async def _postal_pass(self, query: SearchQuery, location: ResolvedLocation) -> PassOutcome:
        trimmed = query.postal_code.strip()
        normalized = normalize_postal_code(trimmed)
        logger.info(f"Searching by zip code: {trimmed!r} (normalized: {normalized!r})")

        if logger.isEnabledFor(logging.DEBUG):
            await self._log_postal_diagnostics(trimmed, normalized)

        try:
            matches = await self.store.find_by_postal_code(trimmed, normalized, self.statuses)
        except StoreQueryError as e:
            logger.warning(f"Error in zip code search, continuing without zip code results: {e}")
            return PassOutcome(degraded=True, reason=str(e))
        logger.info(f"Found {len(matches)} active/review agencies matching zip code {trimmed!r}")

        agencies = []
        for agency in matches:
            coordinates = _agency_coordinates(agency)
            if coordinates is not None and location.usable:
                meters = haversine_meters(location.latitude, location.longitude, *coordinates)
                miles = meters_to_miles(meters)
                if miles > query.radius_miles:
                    continue
                agencies.append({**agency, "distanceInMeters": meters, "distanceInMiles": miles})
            else:
                # Exact postal match without a rankable position
                agencies.append({**agency, "distanceInMeters": 0, "distanceInMiles": 0})
        return PassOutcome(agencies=agencies)

    async def _log_postal_diagnostics(self, trimmed: str, normalized: str) -> None:
        try:
            every_match = await self.store.find_by_postal_code(trimmed, normalized, None)
        except StoreQueryError as e:
            logger.debug(f"Zip code diagnostic lookup failed: {e}")
            return
        summary = [
            {
                "id": str(a.get("_id")),
                "zip_code": a.get("zip_code"),
                "status": a.get("status"),
                "hasLocation": _agency_coordinates(a) is not None,
            }
            for a in every_match
        ]
        logger.debug(f"Agencies matching zip code patterns (any status): {summary}")

    @staticmethod
    def _merge(geo_pass: PassOutcome, postal_pass: Optional[PassOutcome]) -> List[Dict[str, Any]]:
        merged: List[Dict[str, Any]] = []
        seen = set()
        for outcome in (geo_pass, postal_pass):
            if outcome is None:
                continue
            for agency in outcome.agencies:
                agency_id = str(agency.get("_id"))
                if agency_id in seen:
                    continue
                seen.add(agency_id)
                merged.append(agency)
        return merged
