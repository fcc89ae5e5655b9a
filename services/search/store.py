"""Agency store: the read queries proximity search issues against MongoDB."""

import re
from typing import Any, Dict, List, Optional, Protocol, Sequence

from bson.errors import BSONError
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from .distance import MILES_TO_METERS


class StoreQueryError(Exception):
    """A store query failed (missing 2dsphere index, driver error, undecodable document)."""


# Never hand password hashes to search results
_HIDDEN_FIELDS = {"choose_password": 0, "confirm_password": 0}


class AgencyStore(Protocol):
    """Read interface the search engine depends on."""

    async def find_near(
        self,
        latitude: float,
        longitude: float,
        max_distance_meters: float,
        statuses: Sequence[str],
    ) -> List[Dict[str, Any]]:
        """Agencies within max_distance_meters, nearest first, with distanceInMeters/distanceInMiles."""
        ...

    async def find_by_postal_code(
        self,
        trimmed: str,
        normalized: str,
        statuses: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        """Agencies whose zip_code matches the trimmed input or the normalized prefix."""
        ...


def build_postal_code_filter(trimmed: str, normalized: str) -> Dict[str, Any]:
    """
    Build the $or filter for postal code matching:
    exact value, value padded with whitespace, or the normalized 5-char prefix.
    """
    clauses: List[Dict[str, Any]] = [
        {"zip_code": trimmed},
        {"zip_code": {"$regex": f"^\\s*{re.escape(trimmed)}\\s*$", "$options": "i"}},
    ]
    # An empty prefix would match every agency
    if normalized:
        clauses.append({"zip_code": {"$regex": f"^\\s*{re.escape(normalized)}", "$options": "i"}})
    return {"$or": clauses}


class MongoAgencyStore:
    """AgencyStore backed by the agencies collection (2dsphere index on location)."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def find_near(
        self,
        latitude: float,
        longitude: float,
        max_distance_meters: float,
        statuses: Sequence[str],
    ) -> List[Dict[str, Any]]:
        pipeline = [
            {
                "$geoNear": {
                    "near": {"type": "Point", "coordinates": [longitude, latitude]},
                    "distanceField": "distanceInMeters",
                    "maxDistance": max_distance_meters,
                    "spherical": True,
                    "query": {
                        "location.coordinates": {"$exists": True},
                        "status": {"$in": list(statuses)},
                    },
                }
            },
            {"$addFields": {"distanceInMiles": {"$divide": ["$distanceInMeters", MILES_TO_METERS]}}},
            {"$project": _HIDDEN_FIELDS},
        ]
        try:
            cursor = self.collection.aggregate(pipeline)
            return await cursor.to_list(length=None)
        except (PyMongoError, BSONError) as e:
            raise StoreQueryError(f"geoNear query failed: {e}") from e

    async def find_by_postal_code(
        self,
        trimmed: str,
        normalized: str,
        statuses: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        query = build_postal_code_filter(trimmed, normalized)
        if statuses is not None:
            query["status"] = {"$in": list(statuses)}
        try:
            cursor = self.collection.find(query, _HIDDEN_FIELDS)
            return await cursor.to_list(length=None)
        except (PyMongoError, BSONError) as e:
            raise StoreQueryError(f"postal code query failed: {e}") from e
