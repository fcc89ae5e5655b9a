from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional

from bson import ObjectId
from pydantic import BaseModel, Field, ConfigDict


AgencyStatus = Literal["pending", "review", "active", "paused"]

AGENCY_STATUSES = ("pending", "review", "active", "paused")
# Statuses visible to proximity search
SEARCHABLE_AGENCY_STATUSES = ("active", "review")
# Statuses allowed to log in (review agencies are routed to a waiting screen)
LOGIN_AGENCY_STATUSES = ("active", "paused", "review")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PyObjectId(ObjectId):
    """Custom type for handling MongoDB ObjectId in Pydantic models."""

    @classmethod
    def __get_pydantic_core_schema__(cls, _source_type, _handler):
        from pydantic_core import core_schema
        return core_schema.union_schema([
            core_schema.is_instance_schema(ObjectId),
            core_schema.chain_schema([
                core_schema.str_schema(),
                core_schema.no_info_plain_validator_function(cls.validate),
            ])
        ], serialization=core_schema.plain_serializer_function_ser_schema(str, when_used="json"))

    @classmethod
    def validate(cls, v):
        if isinstance(v, ObjectId):
            return v
        if isinstance(v, str) and ObjectId.is_valid(v):
            return ObjectId(v)
        raise ValueError("Invalid ObjectId")


class MongoModel(BaseModel):
    """Base model for MongoDB documents with ObjectId support."""

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    id: Optional[PyObjectId] = Field(default=None, alias="_id")

    def to_document(self) -> dict:
        """Dump for insert_one: keeps ObjectId/datetime, drops unset optionals."""
        doc = self.model_dump(by_alias=True, exclude_none=True)
        if doc.get("_id") is None:
            doc.pop("_id", None)
        return doc


# GeoJSON Point for agency location (2dsphere index)
class GeoPoint(BaseModel):
    type: Literal["Point"] = "Point"
    coordinates: list[float] = Field(min_length=2, max_length=2)  # [longitude, latitude]

    @classmethod
    def from_lat_lng(cls, latitude: float, longitude: float) -> "GeoPoint":
        return cls(coordinates=[longitude, latitude])


class Agency(MongoModel):
    """Partner agency document."""

    contact_email: str
    organization_name: str | None = None
    contact_person_name: str | None = None
    contact_phone: str | None = None
    choose_password: str | None = None  # bcrypt hash
    shipping_address: str | None = None
    suite: str | None = None
    state: str | None = None
    zip_code: str | None = None
    amazon_private: str | None = None
    amazon_public: str | None = None
    geocoded_address: str | None = None
    location: GeoPoint | None = None
    status: AgencyStatus = "pending"
    createdAt: datetime = Field(default_factory=utc_now)
    updatedAt: datetime = Field(default_factory=utc_now)


class Volunteer(MongoModel):
    """Volunteer document."""

    contact_person_name: str
    contact_email: str
    contact_phone: str
    choose_password: str  # bcrypt hash
    zip_code: str
    createdAt: datetime = Field(default_factory=utc_now)


class AdminLogin(MongoModel):
    """Administrator credentials."""

    email: str
    password: str  # bcrypt hash


class AdminInvite(MongoModel):
    """Administrator invitation record."""

    invited_email: str
    status: Literal["pending", "completed"] = "pending"
    createdAt: datetime = Field(default_factory=utc_now)
