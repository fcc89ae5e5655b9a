"""Volunteer routes: registration, login and profile management."""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Response, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from api.dependencies import get_db_dependency, get_mailer_dependency
from api.schemas import (
    LoginResponse,
    VolunteerLoginRequest,
    VolunteerRegisterRequest,
    VolunteerUpdateRequest,
    digits_only,
    is_valid_email,
)
from db.schemas import Volunteer
from db.serialize import parse_object_id, serialize_doc, serialize_docs
from services import email_templates
from services.mailer import Mailer, MailerError
from services.security import create_token, hash_password, set_auth_cookie, verify_password

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/volunteer", tags=["volunteers"])

MIN_PASSWORD_LENGTH = 6
MIN_PHONE_DIGITS = 10
MAX_PHONE_DIGITS = 15


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _validate_registration(body: VolunteerRegisterRequest) -> Dict[str, Any]:
    """Return cleaned registration fields or raise a 400 describing the first problem."""
    name = (body.contact_person_name or "").strip()
    if not name:
        raise _bad_request("Contact person name is required")

    email = (body.contact_email or "").strip()
    if not email:
        raise _bad_request("Contact email is required")
    if not is_valid_email(email):
        raise _bad_request("Invalid email format")

    if body.contact_phone is None or not str(body.contact_phone).strip():
        raise _bad_request("Contact phone is required")
    phone = digits_only(body.contact_phone)
    if len(phone) < MIN_PHONE_DIGITS:
        raise _bad_request("Contact phone must contain at least 10 digits")
    if len(phone) > MAX_PHONE_DIGITS:
        raise _bad_request("Phone number is too long")

    if not body.choose_password:
        raise _bad_request("Password is required")
    if len(body.choose_password) < MIN_PASSWORD_LENGTH:
        raise _bad_request("Password must be at least 6 characters long")
    if not body.repeat_password:
        raise _bad_request("Password confirmation is required")
    if body.choose_password != body.repeat_password:
        raise _bad_request("Passwords do not match")

    zip_code = (body.zip_code or "").strip()
    if not zip_code:
        raise _bad_request("Zip code is required")

    return {
        "contact_person_name": name,
        "contact_email": email.lower(),
        "contact_phone": phone,
        "password": body.choose_password,
        "zip_code": zip_code,
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_volunteer(
    body: VolunteerRegisterRequest,
    db: AsyncIOMotorDatabase = Depends(get_db_dependency),
    mailer: Mailer = Depends(get_mailer_dependency),
):
    """
    Register a volunteer.

    The welcome email is best effort: registration succeeds even when it
    cannot be sent, and the response reports emailSent=false.
    """
    fields = _validate_registration(body)

    if await db.volunteers.find_one({"contact_email": fields["contact_email"]}):
        raise _bad_request("Email already exists")

    volunteer = Volunteer(
        contact_person_name=fields["contact_person_name"],
        contact_email=fields["contact_email"],
        contact_phone=fields["contact_phone"],
        choose_password=hash_password(fields["password"]),
        zip_code=fields["zip_code"],
    )
    try:
        await db.volunteers.insert_one(volunteer.to_document())
    except DuplicateKeyError:
        raise _bad_request("Email already exists")
    logger.info(f"Volunteer registered: {fields['contact_email']}")

    email_sent = True
    subject, text, html = email_templates.volunteer_welcome(fields["contact_person_name"])
    try:
        await mailer.send_mail(fields["contact_email"], subject, text, html)
    except MailerError as e:
        email_sent = False
        logger.error(f"Error sending welcome email to volunteer {fields['contact_email']}: {e}")

    if email_sent:
        return {
            "message": "Volunteer registered successfully! A confirmation email has been sent.",
            "emailSent": True,
        }
    return {
        "message": (
            "Volunteer registered successfully! (Note: Confirmation email could not be sent, "
            "but your registration is complete.)"
        ),
        "emailSent": False,
        "emailError": "Email service temporarily unavailable",
    }


@router.post("/login", response_model=LoginResponse)
async def login_volunteer(
    body: VolunteerLoginRequest,
    response: Response,
    db: AsyncIOMotorDatabase = Depends(get_db_dependency),
) -> LoginResponse:
    email = (body.contact_email or "").strip().lower()
    volunteer = await db.volunteers.find_one({"contact_email": email}) if email else None
    if not volunteer or not verify_password(body.choose_password, volunteer.get("choose_password")):
        raise _bad_request("Invalid email or password")

    volunteer_id = str(volunteer["_id"])
    token = create_token({"id": volunteer_id, "email": volunteer.get("contact_email")})
    set_auth_cookie(response, token)
    return LoginResponse(message="Login successful", token=token, id=volunteer_id)


@router.get("/getAllVolunteers")
async def get_all_volunteers(db: AsyncIOMotorDatabase = Depends(get_db_dependency)):
    volunteers = await db.volunteers.find({}, {"choose_password": 0}).to_list(length=None)
    return serialize_docs(volunteers)


@router.get("/{volunteer_id}")
async def get_volunteer_by_id(volunteer_id: str, db: AsyncIOMotorDatabase = Depends(get_db_dependency)):
    object_id = parse_object_id(volunteer_id)
    if object_id is None:
        raise _bad_request("Invalid volunteer ID")
    volunteer = await db.volunteers.find_one({"_id": object_id})
    if not volunteer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Volunteer not found")
    return {"volunteer": serialize_doc(volunteer)}


@router.patch("/{volunteer_id}")
async def update_volunteer_by_id(
    volunteer_id: str,
    body: VolunteerUpdateRequest,
    db: AsyncIOMotorDatabase = Depends(get_db_dependency),
):
    """Partial update. Changing the password requires both matching password fields."""
    object_id = parse_object_id(volunteer_id)
    if object_id is None:
        raise _bad_request("Invalid volunteer ID")

    updates = body.model_dump(exclude_unset=True, exclude_none=True)
    password = updates.pop("choose_password", None)
    repeat = updates.pop("repeat_password", None)
    if password or repeat:
        if not password or not repeat:
            raise _bad_request("Both password fields are required to update password")
        if password != repeat:
            raise _bad_request("Passwords do not match")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise _bad_request("Password must be at least 6 characters long")
        updates["choose_password"] = hash_password(password)

    if "contact_email" in updates:
        if not is_valid_email(updates["contact_email"]):
            raise _bad_request("Invalid email format")
        updates["contact_email"] = updates["contact_email"].strip().lower()
    if "contact_phone" in updates:
        phone = digits_only(updates["contact_phone"])
        if not MIN_PHONE_DIGITS <= len(phone) <= MAX_PHONE_DIGITS:
            raise _bad_request("Contact phone must contain 10 to 15 digits")
        updates["contact_phone"] = phone

    if not updates:
        raise _bad_request("No fields to update")

    try:
        updated = await db.volunteers.find_one_and_update(
            {"_id": object_id},
            {"$set": updates},
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError:
        raise _bad_request("Email already exists")
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Volunteer not found")
    return {"message": "Volunteer updated successfully", "volunteer": serialize_doc(updated)}
