"""In-memory stand-ins for the agency store and geocoder."""

import re
from typing import Any, Dict, List, Optional, Sequence

from bson import ObjectId

from services.geocoding import GeocodeResult, GeocodingError
from services.search import StoreQueryError, build_postal_code_filter
from services.search.distance import MILES_TO_METERS, haversine_meters


def make_agency(
    status: str = "active",
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    zip_code: Optional[str] = None,
    **extra: Any,
) -> Dict[str, Any]:
    """Build an agency document the way it is stored in MongoDB."""
    agency: Dict[str, Any] = {
        "_id": ObjectId(),
        "contact_email": f"agency-{ObjectId()}@example.org",
        "status": status,
        **extra,
    }
    if lat is not None and lng is not None:
        agency["location"] = {"type": "Point", "coordinates": [lng, lat]}
    if zip_code is not None:
        agency["zip_code"] = zip_code
    return agency


def _matches_clause(agency: Dict[str, Any], clause: Dict[str, Any]) -> bool:
    value = agency.get("zip_code")
    if value is None:
        return False
    condition = clause["zip_code"]
    if isinstance(condition, dict):
        flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
        return re.search(condition["$regex"], value, flags) is not None
    return value == condition


class FakeAgencyStore:
    """In-memory AgencyStore that evaluates the same filters MongoDB would."""

    def __init__(
        self,
        agencies: List[Dict[str, Any]],
        fail_geo: bool = False,
        fail_postal: bool = False,
    ):
        self.agencies = agencies
        self.fail_geo = fail_geo
        self.fail_postal = fail_postal
        self.calls: List[str] = []

    async def find_near(
        self,
        latitude: float,
        longitude: float,
        max_distance_meters: float,
        statuses: Sequence[str],
    ) -> List[Dict[str, Any]]:
        self.calls.append("find_near")
        if self.fail_geo:
            raise StoreQueryError("unable to find index for $geoNear query")
        results = []
        for agency in self.agencies:
            coordinates = (agency.get("location") or {}).get("coordinates")
            if not coordinates or agency.get("status") not in statuses:
                continue
            meters = haversine_meters(latitude, longitude, coordinates[1], coordinates[0])
            if meters <= max_distance_meters:
                results.append({
                    **agency,
                    "distanceInMeters": meters,
                    "distanceInMiles": meters / MILES_TO_METERS,
                })
        return sorted(results, key=lambda a: a["distanceInMeters"])

    async def find_by_postal_code(
        self,
        trimmed: str,
        normalized: str,
        statuses: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        self.calls.append("find_by_postal_code")
        if self.fail_postal:
            raise StoreQueryError("postal code query failed: connection reset")
        clauses = build_postal_code_filter(trimmed, normalized)["$or"]
        return [
            dict(agency)
            for agency in self.agencies
            if (statuses is None or agency.get("status") in statuses)
            and any(_matches_clause(agency, clause) for clause in clauses)
        ]


class FakeGeocoder:
    """Resolves only the addresses it was given; everything else fails."""

    def __init__(self, known: Optional[Dict[str, tuple]] = None):
        self.known = known or {}
        self.calls: List[str] = []

    async def geocode(self, address: str, provider: Optional[str] = None) -> GeocodeResult:
        self.calls.append(address)
        if address not in self.known:
            raise GeocodingError("Geocoding failed: no results found")
        lat, lng = self.known[address]
        return GeocodeResult(latitude=lat, longitude=lng, formatted_address=address)


def mock_cursor(documents: List[Dict[str, Any]]):
    """Motor cursor mock whose to_list() resolves to the given documents."""
    from unittest.mock import AsyncMock, MagicMock

    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=documents)
    return cursor
