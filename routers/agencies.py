"""Agency routes: invitation, onboarding, admin review, login and proximity search."""

import logging
import re
from typing import Any, Dict, Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from api.dependencies import (
    get_db_dependency,
    get_geocoder_dependency,
    get_mailer_dependency,
    get_search_engine_dependency,
)
from api.schemas import (
    AgencyLoginRequest,
    AgencyUpdateRequest,
    InviteAgencyRequest,
    LoginResponse,
    NearbyAgenciesResponse,
    PauseAgencyRequest,
    ReviewAgencyRequest,
    SubmitDetailsRequest,
    is_valid_email,
)
from db.schemas import LOGIN_AGENCY_STATUSES, Agency, GeoPoint, utc_now
from db.serialize import parse_object_id, serialize_doc, serialize_docs
from modules.config import ConfigEnv
from services import email_templates
from services.geocoding import GeocodingError, GeocodingService
from services.mailer import Mailer, MailerError
from services.search import AgencySearchEngine, SearchInputError, SearchQuery
from services.security import create_token, hash_password, set_auth_cookie, verify_password

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/agencies", tags=["agencies"])

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

DETAIL_FIELDS = (
    "organization_name",
    "contact_person_name",
    "contact_phone",
    "shipping_address",
    "suite",
    "state",
    "zip_code",
)
ADDRESS_FIELDS = ("shipping_address", "suite", "state", "zip_code")


def _require_object_id(value: Optional[str], detail: str = "Invalid agency ID") -> ObjectId:
    agency_id = parse_object_id(value)
    if agency_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
    return agency_id


def _full_address(agency: Dict[str, Any]) -> str:
    parts = [agency.get(field) for field in ADDRESS_FIELDS]
    return ", ".join(str(part).strip() for part in parts if part and str(part).strip())


@router.post("/invite-agency")
async def invite_agency(
    body: InviteAgencyRequest,
    db: AsyncIOMotorDatabase = Depends(get_db_dependency),
    mailer: Mailer = Depends(get_mailer_dependency),
):
    """
    Invite an agency by email (admin only).

    The invitation email is sent before anything is stored; if sending fails
    the agency is not created.
    """
    contact_email = (body.contact_email or "").strip().lower()
    if not is_valid_email(contact_email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="A valid contact_email is required")

    if await db.agencies.find_one({"contact_email": contact_email}):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Agency already invited")

    # The id is part of the onboarding link, so it is chosen before the insert
    agency_id = ObjectId()
    invitation_link = f"{ConfigEnv.AGENCY_INVITE_BASE_URL.rstrip('/')}/{agency_id}/onboarding"

    subject, text, html = email_templates.agency_invitation(invitation_link)
    try:
        sent = await mailer.send_mail(contact_email, subject, text, html)
    except MailerError as e:
        logger.error(f"[inviteAgency] Error sending invitation email to {contact_email}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send invitation email. Agency was not invited.",
        )

    agency = Agency(id=agency_id, contact_email=contact_email, status="pending")
    doc = agency.to_document()
    try:
        await db.agencies.insert_one(doc)
    except DuplicateKeyError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Agency already invited")
    logger.info(f"[inviteAgency] Agency created with ID: {agency_id}")

    return {
        "message": "Invitation sent successfully!",
        "agency": serialize_doc(doc),
        "invitationLink": invitation_link,
        "emailSent": True,
        "messageId": sent.message_id,
    }


@router.post("/submit-details")
async def submit_details(
    body: SubmitDetailsRequest,
    id: Optional[str] = Query(None),
    db: AsyncIOMotorDatabase = Depends(get_db_dependency),
    geocoder: GeocodingService = Depends(get_geocoder_dependency),
):
    """
    Onboarding form submitted by an invited agency.

    Only provided values overwrite stored ones. When address fields are
    present the full address is geocoded; a geocoding failure is logged and
    the details are saved without a location.
    """
    raw_id = body.agency_id or body.id or id
    if not raw_id or raw_id == "undefined":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing or invalid agency ID in request")
    agency_id = _require_object_id(raw_id, "Missing or invalid agency ID in request")

    agency = await db.agencies.find_one({"_id": agency_id})
    if not agency:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Agency not found")

    if body.choose_password and body.choose_password != body.confirm_password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Passwords do not match")

    updates: Dict[str, Any] = {}
    if body.choose_password:
        updates["choose_password"] = hash_password(body.choose_password)

    for field in DETAIL_FIELDS:
        value = getattr(body, field)
        if value:
            updates[field] = str(value).strip() if field == "contact_phone" else value

    address_fields_provided = any(getattr(body, field) is not None for field in ADDRESS_FIELDS)
    full_address = _full_address({**agency, **updates})
    if address_fields_provided and full_address:
        try:
            result = await geocoder.geocode(full_address)
            updates["location"] = GeoPoint.from_lat_lng(result.latitude, result.longitude).model_dump()
            updates["geocoded_address"] = result.formatted_address
        except GeocodingError as e:
            logger.error(f"Geocoding failed for agency {agency_id}: {e}")

    if body.amazon_private is not None:
        updates["amazon_private"] = body.amazon_private
    if body.amazon_public is not None:
        updates["amazon_public"] = body.amazon_public

    if agency.get("status") == "pending":
        updates["status"] = "review"
    updates["updatedAt"] = utc_now()

    updated = await db.agencies.find_one_and_update(
        {"_id": agency_id},
        {"$set": updates},
        return_document=ReturnDocument.AFTER,
    )
    return {"message": "Agency details updated successfully!", "agency": serialize_doc(updated)}


@router.post("/review-agency")
async def review_agency(
    body: ReviewAgencyRequest,
    db: AsyncIOMotorDatabase = Depends(get_db_dependency),
):
    """Approve an agency (admin): store the Amazon wishlist links and activate it."""
    if not body.agencyId:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Agency ID is required")
    agency_id = _require_object_id(body.agencyId)

    updated = await db.agencies.find_one_and_update(
        {"_id": agency_id},
        {"$set": {
            "amazon_private": body.amazon_private,
            "amazon_public": body.amazon_public,
            "status": "active",
            "updatedAt": utc_now(),
        }},
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Agency not found")
    return {"message": "Agency approved and activated!", "agency": serialize_doc(updated)}


@router.post("/pause-agency")
async def pause_agency(
    body: PauseAgencyRequest,
    db: AsyncIOMotorDatabase = Depends(get_db_dependency),
):
    """Toggle an agency between paused and active (admin)."""
    if not body.agencyId:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Agency ID is required")
    agency_id = _require_object_id(body.agencyId)

    agency = await db.agencies.find_one({"_id": agency_id})
    if not agency:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Agency not found")

    new_status = "active" if agency.get("status") == "paused" else "paused"
    updated = await db.agencies.find_one_and_update(
        {"_id": agency_id},
        {"$set": {"status": new_status, "updatedAt": utc_now()}},
        return_document=ReturnDocument.AFTER,
    )
    return {"message": f"Agency {new_status} successfully!", "agency": serialize_doc(updated)}


@router.post("/login", response_model=LoginResponse)
async def login_agency(
    body: AgencyLoginRequest,
    response: Response,
    db: AsyncIOMotorDatabase = Depends(get_db_dependency),
) -> LoginResponse:
    contact_email = (body.contact_email or "").strip()
    if not contact_email or not body.choose_password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email or password")

    if await db.volunteers.find_one({"contact_email": contact_email.lower()}):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email is already registered as a volunteer",
        )

    agency = await db.agencies.find_one(
        {"contact_email": {"$regex": f"^{re.escape(contact_email)}$", "$options": "i"}}
    )
    if not agency or not verify_password(body.choose_password, agency.get("choose_password")):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email or password")

    if agency.get("status") not in LOGIN_AGENCY_STATUSES:
        logger.info(f"Blocking agency login - status not allowed: {agency.get('status')}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account is not active yet. Please wait for admin approval.",
        )

    agency_id = str(agency["_id"])
    token = create_token({"id": agency_id, "contact_email": agency.get("contact_email")})
    set_auth_cookie(response, token)
    return LoginResponse(message="Login successful", token=token, id=agency_id)


@router.get("/nearby", response_model=NearbyAgenciesResponse)
async def filter_agencies_by_radius(
    response: Response,
    latitude: Optional[str] = Query(None),
    longitude: Optional[str] = Query(None),
    radiusMiles: Optional[str] = Query(None),
    address: Optional[str] = Query(None),
    postalCode: Optional[str] = Query(None),
    zip_code: Optional[str] = Query(None, description="Alias of postalCode"),
    engine: AgencySearchEngine = Depends(get_search_engine_dependency),
) -> NearbyAgenciesResponse:
    """
    Find search-eligible agencies near a location.

    Location comes from latitude/longitude, or from geocoding the address or
    postal code. Agencies matching the postal code are merged in when the
    geo search finds nothing. Results are sorted by distanceInMiles.
    """
    # Ranked results depend on the query; never serve them from a cache
    response.headers.update(NO_CACHE_HEADERS)
    try:
        query = SearchQuery.from_params(
            latitude=latitude,
            longitude=longitude,
            radius_miles=radiusMiles,
            address=address,
            postal_code=postalCode or zip_code,
            default_radius_miles=ConfigEnv.DEFAULT_SEARCH_RADIUS_MILES,
        )
        result = await engine.search(query)
    except SearchInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e), headers=NO_CACHE_HEADERS)
    except Exception:
        logger.exception("Error filtering agencies")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error filtering agencies",
            headers=NO_CACHE_HEADERS,
        )

    return NearbyAgenciesResponse(
        message="Agencies filtered successfully",
        agencies=serialize_docs(result.agencies),
    )


@router.get("/agencies")
async def get_all_agencies(db: AsyncIOMotorDatabase = Depends(get_db_dependency)):
    agencies = await db.agencies.find({}, {"choose_password": 0}).to_list(length=None)
    return {"message": "All agencies retrieved successfully", "agencies": serialize_docs(agencies)}


@router.get("/agency/{agency_id}")
async def get_agency_by_id(agency_id: str, db: AsyncIOMotorDatabase = Depends(get_db_dependency)):
    agency = await db.agencies.find_one({"_id": _require_object_id(agency_id)})
    if not agency:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Agency not found")
    return {"message": "Agency retrieved successfully", "agency": serialize_doc(agency)}


@router.patch("/agency/{agency_id}")
async def update_agency_by_id(
    agency_id: str,
    body: AgencyUpdateRequest,
    db: AsyncIOMotorDatabase = Depends(get_db_dependency),
):
    """Partial update; unknown fields are ignored and a new password is hashed."""
    object_id = _require_object_id(agency_id)
    updates = body.model_dump(exclude_unset=True, exclude_none=True)
    if not updates:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    if "contact_email" in updates:
        if not is_valid_email(updates["contact_email"]):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email format")
        updates["contact_email"] = updates["contact_email"].strip().lower()
    if "contact_phone" in updates:
        updates["contact_phone"] = str(updates["contact_phone"]).strip()
    if "choose_password" in updates:
        updates["choose_password"] = hash_password(updates["choose_password"])
    updates["updatedAt"] = utc_now()

    try:
        updated = await db.agencies.find_one_and_update(
            {"_id": object_id},
            {"$set": updates},
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already in use")
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Agency not found")
    return {"message": "Agency updated successfully", "updatedAgency": serialize_doc(updated)}
