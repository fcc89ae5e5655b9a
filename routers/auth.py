"""Password reset routes shared by admins, agencies and volunteers."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from api.dependencies import get_db_dependency, get_mailer_dependency
from api.schemas import ForgotPasswordRequest, ResetPasswordRequest
from modules.config import ConfigEnv
from services import email_templates
from services.mailer import Mailer, MailerError
from services.security import (
    PASSWORD_RESET_PURPOSE,
    create_password_reset_token,
    decode_token,
    hash_password,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])

RESET_REQUESTED_MESSAGE = "If an account exists with this email, a password reset link has been sent."
MIN_PASSWORD_LENGTH = 6


@dataclass
class AccountMatch:
    collection: str
    email_field: str
    password_field: str
    document: Dict[str, Any]

    @property
    def email(self) -> str:
        return self.document.get(self.email_field, "")


# Lookup order: admins, then agencies, then volunteers
ACCOUNT_SOURCES = (
    ("admin_logins", "email", "password"),
    ("agencies", "contact_email", "choose_password"),
    ("volunteers", "contact_email", "choose_password"),
)


async def find_account_by_email(db: AsyncIOMotorDatabase, email: str) -> Optional[AccountMatch]:
    """Return the first account (admin, agency or volunteer) registered with this email."""
    for collection, email_field, password_field in ACCOUNT_SOURCES:
        document = await db[collection].find_one({email_field: email})
        if document:
            return AccountMatch(collection, email_field, password_field, document)
    return None


@router.post("/forgot-password")
async def request_password_reset(
    body: ForgotPasswordRequest,
    db: AsyncIOMotorDatabase = Depends(get_db_dependency),
    mailer: Mailer = Depends(get_mailer_dependency),
):
    """
    Email a 15-minute reset link.

    The response is identical whether or not the account exists.
    """
    email = (body.email or "").strip().lower()
    if not email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required")

    account = await find_account_by_email(db, email)
    if not account:
        return {"message": RESET_REQUESTED_MESSAGE}

    reset_token = create_password_reset_token(account.email)
    reset_link = f"{ConfigEnv.FRONTEND_URL.rstrip('/')}/v/reset-password?token={reset_token}"
    subject, text, html = email_templates.password_reset(reset_link)
    try:
        await mailer.send_mail(account.email, subject, text, html)
    except MailerError as e:
        logger.error(f"Error in requestPasswordReset: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send password reset email. Please try again later.",
        )

    return {"message": RESET_REQUESTED_MESSAGE}


@router.post("/reset-password")
async def reset_password(
    body: ResetPasswordRequest,
    db: AsyncIOMotorDatabase = Depends(get_db_dependency),
):
    if not body.token or not body.newPassword or not body.confirmPassword:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="All fields are required")
    if len(body.newPassword) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Password must be at least 6 characters long",
        )
    if body.newPassword != body.confirmPassword:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Passwords do not match")

    try:
        payload = decode_token(body.token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Token has expired. Please request a new password reset link.",
        )
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid token")

    # Session tokens must not double as reset tokens
    if payload.get("purpose") != PASSWORD_RESET_PURPOSE or not payload.get("email"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid token")

    account = await find_account_by_email(db, payload["email"])
    if not account:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invalid token or user not found")

    await db[account.collection].update_one(
        {"_id": account.document["_id"]},
        {"$set": {account.password_field: hash_password(body.newPassword)}},
    )
    logger.info(f"Password reset for {account.collection} account")
    return {"message": "Password reset successful"}
