"""Pydantic schemas for API request/response models.

Most request fields are optional on purpose: handlers validate them and answer
with the 400 messages the frontend displays, instead of FastAPI's 422 payloads.
"""

import re
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict

from db.schemas import AgencyStatus

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(value: Optional[str]) -> bool:
    return bool(value) and bool(EMAIL_PATTERN.match(value.strip()))


class RequestModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


# ----- Agencies -----

class InviteAgencyRequest(RequestModel):
    contact_email: Optional[str] = None


class SubmitDetailsRequest(RequestModel):
    agency_id: Optional[str] = None
    id: Optional[str] = None
    organization_name: Optional[str] = None
    contact_person_name: Optional[str] = None
    contact_phone: Optional[Union[str, int]] = None
    shipping_address: Optional[str] = None
    suite: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    choose_password: Optional[str] = None
    confirm_password: Optional[str] = None
    amazon_private: Optional[str] = None
    amazon_public: Optional[str] = None


class ReviewAgencyRequest(RequestModel):
    agencyId: Optional[str] = None
    amazon_private: Optional[str] = None
    amazon_public: Optional[str] = None


class PauseAgencyRequest(RequestModel):
    agencyId: Optional[str] = None


class AgencyLoginRequest(RequestModel):
    contact_email: Optional[str] = None
    choose_password: Optional[str] = None


class AgencyUpdateRequest(RequestModel):
    organization_name: Optional[str] = None
    contact_person_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[Union[str, int]] = None
    shipping_address: Optional[str] = None
    suite: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    amazon_private: Optional[str] = None
    amazon_public: Optional[str] = None
    status: Optional[AgencyStatus] = None
    choose_password: Optional[str] = None


# ----- Volunteers -----

class VolunteerRegisterRequest(RequestModel):
    contact_person_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[Union[str, int]] = None
    choose_password: Optional[str] = None
    repeat_password: Optional[str] = None
    zip_code: Optional[str] = None


class VolunteerLoginRequest(RequestModel):
    contact_email: Optional[str] = None
    choose_password: Optional[str] = None


class VolunteerUpdateRequest(RequestModel):
    contact_person_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[Union[str, int]] = None
    zip_code: Optional[str] = None
    choose_password: Optional[str] = None
    repeat_password: Optional[str] = None


# ----- Admin -----

class AdminLoginRequest(RequestModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AdminInviteRequest(RequestModel):
    invited_email: Optional[str] = None


# ----- Password reset -----

class ForgotPasswordRequest(RequestModel):
    email: Optional[str] = None


class ResetPasswordRequest(RequestModel):
    token: Optional[str] = None
    newPassword: Optional[str] = None
    confirmPassword: Optional[str] = None


# ----- Responses -----

class LoginResponse(BaseModel):
    message: str
    token: str
    id: Optional[str] = None


class NearbyAgenciesResponse(BaseModel):
    message: str
    agencies: List[dict]


def digits_only(value: Union[str, int, None]) -> str:
    """Strip every non-digit character ("(916) 555-0100" -> "9165550100")."""
    if value is None:
        return ""
    return re.sub(r"\D", "", str(value))
