"""Tests for admin routes and the shared password reset flow."""

from datetime import timedelta

from bson import ObjectId

from fakes import mock_cursor
from services.mailer import MailerError
from services.security import (
    create_password_reset_token,
    create_token,
    decode_token,
    hash_password,
    verify_password,
)


# ----- Admin -----

def test_admin_login(test_client, mock_db):
    mock_db.admin_logins.find_one.return_value = {
        "_id": ObjectId(),
        "email": "admin@fostertoys.org",
        "password": hash_password("admin-pass"),
    }

    response = test_client.post(
        "/api/admin/login", json={"email": "Admin@FosterToys.org", "password": "admin-pass"}
    )

    assert response.status_code == 200
    assert decode_token(response.json()["token"])["email"] == "admin@fostertoys.org"
    assert mock_db.admin_logins.find_one.call_args[0][0] == {"email": "admin@fostertoys.org"}


def test_admin_login_failures(test_client, mock_db):
    assert test_client.post("/api/admin/login", json={"email": "admin@fostertoys.org"}).status_code == 400

    response = test_client.post("/api/admin/login", json={"email": "admin@fostertoys.org", "password": "x"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_invite_admin_pending_sends_email(test_client, mock_db, mock_mailer):
    response = test_client.post("/api/admin/invite-admin", json={"invited_email": "new@example.org"})

    assert response.status_code == 200
    assert response.json()["message"] == "Invitation sent successfully. Status: pending"
    assert mock_db.admin_invites.insert_one.call_args[0][0]["status"] == "pending"
    assert mock_mailer.send_mail.call_args[0][1] == "Admin Invitation - Foster Toys"


def test_invite_admin_completed_when_agency_exists(test_client, mock_db, mock_mailer):
    mock_db.agencies.find_one.return_value = {"_id": ObjectId(), "contact_email": "agency@example.org"}

    response = test_client.post("/api/admin/invite-admin", json={"invited_email": "agency@example.org"})

    assert response.json()["message"] == "Invitation sent successfully. Status: completed"
    mock_mailer.send_mail.assert_not_called()


def test_invite_admin_validation(test_client):
    assert test_client.post("/api/admin/invite-admin", json={}).json()["detail"] == "Email is required"
    assert test_client.post("/api/admin/invite-admin", json={"invited_email": "bad"}).status_code == 400


def test_list_invites(test_client, mock_db):
    invite_id = ObjectId()
    mock_db.admin_invites.find.return_value = mock_cursor([
        {"_id": invite_id, "invited_email": "new@example.org", "status": "pending"},
    ])

    response = test_client.get("/api/admin/invites")

    assert response.json() == {
        "success": True,
        "data": [{"_id": str(invite_id), "invited_email": "new@example.org", "status": "pending"}],
    }


# ----- Password reset -----

def test_forgot_password_unknown_email_gives_generic_reply(test_client, mock_mailer):
    response = test_client.post("/api/auth/forgot-password", json={"email": "ghost@example.org"})

    assert response.status_code == 200
    assert response.json()["message"].startswith("If an account exists")
    mock_mailer.send_mail.assert_not_called()


def test_forgot_password_emails_volunteer(test_client, mock_db, mock_mailer):
    mock_db.volunteers.find_one.return_value = {"_id": ObjectId(), "contact_email": "sam@example.org"}

    response = test_client.post("/api/auth/forgot-password", json={"email": "Sam@Example.org"})

    assert response.status_code == 200
    to, subject, text, _ = mock_mailer.send_mail.call_args[0]
    assert to == "sam@example.org"
    assert subject == "Password Reset Request - Foster Toys"
    token = text.split("token=")[1].split()[0]
    assert decode_token(token)["email"] == "sam@example.org"


def test_forgot_password_mail_failure(test_client, mock_db, mock_mailer):
    mock_db.admin_logins.find_one.return_value = {"_id": ObjectId(), "email": "admin@fostertoys.org"}
    mock_mailer.send_mail.side_effect = MailerError("smtp down")

    response = test_client.post("/api/auth/forgot-password", json={"email": "admin@fostertoys.org"})

    assert response.status_code == 500


def test_reset_password_updates_agency_hash(test_client, mock_db):
    agency_id = ObjectId()
    mock_db.agencies.find_one.return_value = {"_id": agency_id, "contact_email": "agency@example.org"}
    token = create_password_reset_token("agency@example.org")

    response = test_client.post(
        "/api/auth/reset-password",
        json={"token": token, "newPassword": "fresh-pass", "confirmPassword": "fresh-pass"},
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Password reset successful"
    query, update = mock_db.agencies.update_one.call_args[0]
    assert query == {"_id": agency_id}
    assert verify_password("fresh-pass", update["$set"]["choose_password"])


def test_reset_password_validation(test_client):
    token = create_password_reset_token("agency@example.org")

    missing = test_client.post("/api/auth/reset-password", json={"token": token})
    short = test_client.post(
        "/api/auth/reset-password", json={"token": token, "newPassword": "abc", "confirmPassword": "abc"}
    )
    mismatch = test_client.post(
        "/api/auth/reset-password",
        json={"token": token, "newPassword": "fresh-pass", "confirmPassword": "other-pass"},
    )

    assert missing.json()["detail"] == "All fields are required"
    assert short.json()["detail"] == "Password must be at least 6 characters long"
    assert mismatch.json()["detail"] == "Passwords do not match"


def test_reset_password_rejects_expired_and_session_tokens(test_client):
    expired = create_token(
        {"email": "agency@example.org", "purpose": "password_reset"}, expires_in=timedelta(seconds=-1)
    )
    session = create_token({"email": "agency@example.org"})
    body = {"newPassword": "fresh-pass", "confirmPassword": "fresh-pass"}

    expired_response = test_client.post("/api/auth/reset-password", json={**body, "token": expired})
    session_response = test_client.post("/api/auth/reset-password", json={**body, "token": session})
    garbage_response = test_client.post("/api/auth/reset-password", json={**body, "token": "garbage"})

    assert expired_response.status_code == 400
    assert "expired" in expired_response.json()["detail"]
    assert session_response.json()["detail"] == "Invalid token"
    assert garbage_response.json()["detail"] == "Invalid token"


def test_reset_password_unknown_account(test_client):
    token = create_password_reset_token("ghost@example.org")

    response = test_client.post(
        "/api/auth/reset-password",
        json={"token": token, "newPassword": "fresh-pass", "confirmPassword": "fresh-pass"},
    )

    assert response.status_code == 404
