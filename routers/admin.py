"""Admin routes: login and administrator invitations."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from api.dependencies import get_db_dependency, get_mailer_dependency
from api.schemas import AdminInviteRequest, AdminLoginRequest, LoginResponse, is_valid_email
from db.schemas import AdminInvite
from db.serialize import serialize_docs
from modules.config import ConfigEnv
from services import email_templates
from services.mailer import Mailer, MailerError
from services.security import create_token, set_auth_cookie, verify_password

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/login", response_model=LoginResponse)
async def admin_login(
    body: AdminLoginRequest,
    response: Response,
    db: AsyncIOMotorDatabase = Depends(get_db_dependency),
) -> LoginResponse:
    if not body.email or not body.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required",
        )

    admin = await db.admin_logins.find_one({"email": body.email.strip().lower()})
    if not admin or not verify_password(body.password, admin.get("password")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    token = create_token({"email": admin["email"]})
    set_auth_cookie(response, token)
    return LoginResponse(message="Login successful", token=token)


@router.post("/invite-admin")
async def send_invite(
    body: AdminInviteRequest,
    db: AsyncIOMotorDatabase = Depends(get_db_dependency),
    mailer: Mailer = Depends(get_mailer_dependency),
):
    """
    Record an administrator invitation.

    If an agency already uses the email the invite is stored as completed and
    no email goes out; otherwise it is pending and a registration link is sent.
    """
    invited_email = (body.invited_email or "").strip().lower()
    if not invited_email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required")
    if not is_valid_email(invited_email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email format")

    existing_agency = await db.agencies.find_one({"contact_email": invited_email})
    invite = AdminInvite(
        invited_email=invited_email,
        status="completed" if existing_agency else "pending",
    )
    await db.admin_invites.insert_one(invite.to_document())

    if invite.status == "pending":
        register_link = f"{ConfigEnv.FRONTEND_URL.rstrip('/')}/register"
        subject, text, html = email_templates.admin_invitation(register_link)
        try:
            await mailer.send_mail(invited_email, subject, text, html)
        except MailerError as e:
            logger.error(f"Error sending admin invitation to {invited_email}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to send invitation email",
            )

    return {"message": f"Invitation sent successfully. Status: {invite.status}"}


@router.get("/invites")
async def get_all_invites(db: AsyncIOMotorDatabase = Depends(get_db_dependency)):
    invites = await db.admin_invites.find({}, {"invited_email": 1, "status": 1}).to_list(length=None)
    return {"success": True, "data": serialize_docs(invites)}
