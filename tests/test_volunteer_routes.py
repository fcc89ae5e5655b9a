"""Tests for volunteer registration, login and profile routes."""

import pytest
from bson import ObjectId

from fakes import mock_cursor
from services.mailer import MailerError
from services.security import decode_token, hash_password, verify_password


def _registration(**overrides):
    body = {
        "contact_person_name": "Sam Rivera",
        "contact_email": "Sam@Example.org",
        "contact_phone": "(916) 555-0100",
        "choose_password": "secret1",
        "repeat_password": "secret1",
        "zip_code": "95814",
    }
    body.update(overrides)
    return body


def test_register_volunteer(test_client, mock_db, mock_mailer):
    response = test_client.post("/api/volunteer/register", json=_registration())

    assert response.status_code == 201
    assert response.json()["emailSent"] is True
    inserted = mock_db.volunteers.insert_one.call_args[0][0]
    assert inserted["contact_email"] == "sam@example.org"
    assert inserted["contact_phone"] == "9165550100"
    assert verify_password("secret1", inserted["choose_password"])
    assert mock_mailer.send_mail.call_args[0][1] == "Welcome to Foster Toys!"


def test_register_succeeds_when_welcome_email_fails(test_client, mock_db, mock_mailer):
    mock_mailer.send_mail.side_effect = MailerError("smtp down")

    response = test_client.post("/api/volunteer/register", json=_registration())

    assert response.status_code == 201
    data = response.json()
    assert data["emailSent"] is False
    assert "emailError" in data
    mock_db.volunteers.insert_one.assert_called_once()


@pytest.mark.parametrize("overrides, detail", [
    ({"contact_person_name": "  "}, "Contact person name is required"),
    ({"contact_email": ""}, "Contact email is required"),
    ({"contact_email": "sam@"}, "Invalid email format"),
    ({"contact_phone": None}, "Contact phone is required"),
    ({"contact_phone": "555-0100"}, "Contact phone must contain at least 10 digits"),
    ({"contact_phone": "1234567890123456"}, "Phone number is too long"),
    ({"choose_password": ""}, "Password is required"),
    ({"choose_password": "abc", "repeat_password": "abc"}, "Password must be at least 6 characters long"),
    ({"repeat_password": ""}, "Password confirmation is required"),
    ({"repeat_password": "secret2"}, "Passwords do not match"),
    ({"zip_code": " "}, "Zip code is required"),
])
def test_register_validation(test_client, mock_db, overrides, detail):
    response = test_client.post("/api/volunteer/register", json=_registration(**overrides))

    assert response.status_code == 400
    assert response.json()["detail"] == detail
    mock_db.volunteers.insert_one.assert_not_called()


def test_register_duplicate_email(test_client, mock_db):
    mock_db.volunteers.find_one.return_value = {"_id": ObjectId(), "contact_email": "sam@example.org"}

    response = test_client.post("/api/volunteer/register", json=_registration())

    assert response.status_code == 400
    assert response.json()["detail"] == "Email already exists"


def test_volunteer_login(test_client, mock_db):
    volunteer_id = ObjectId()
    mock_db.volunteers.find_one.return_value = {
        "_id": volunteer_id,
        "contact_email": "sam@example.org",
        "choose_password": hash_password("secret1"),
    }

    response = test_client.post(
        "/api/volunteer/login", json={"contact_email": "sam@example.org", "choose_password": "secret1"}
    )

    assert response.status_code == 200
    payload = decode_token(response.json()["token"])
    assert payload["id"] == str(volunteer_id)
    assert payload["email"] == "sam@example.org"


def test_volunteer_login_rejects_bad_password(test_client, mock_db):
    mock_db.volunteers.find_one.return_value = {"_id": ObjectId(), "choose_password": hash_password("secret1")}

    response = test_client.post(
        "/api/volunteer/login", json={"contact_email": "sam@example.org", "choose_password": "nope"}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid email or password"


def test_get_all_volunteers_hides_passwords(test_client, mock_db):
    mock_db.volunteers.find.return_value = mock_cursor([
        {"_id": ObjectId(), "contact_email": "sam@example.org", "choose_password": "$2b$10$hash"},
    ])

    response = test_client.get("/api/volunteer/getAllVolunteers")

    assert response.status_code == 200
    volunteers = response.json()
    assert len(volunteers) == 1
    assert "choose_password" not in volunteers[0]


def test_get_volunteer_by_id(test_client, mock_db):
    assert test_client.get("/api/volunteer/not-an-id").status_code == 400
    assert test_client.get(f"/api/volunteer/{ObjectId()}").status_code == 404

    volunteer_id = ObjectId()
    mock_db.volunteers.find_one.return_value = {"_id": volunteer_id, "contact_email": "sam@example.org"}
    response = test_client.get(f"/api/volunteer/{volunteer_id}")
    assert response.json()["volunteer"]["_id"] == str(volunteer_id)


def test_update_volunteer_password_requires_both_fields(test_client):
    response = test_client.patch(f"/api/volunteer/{ObjectId()}", json={"choose_password": "secret9"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Both password fields are required to update password"


def test_update_volunteer(test_client, mock_db):
    volunteer_id = ObjectId()
    mock_db.volunteers.find_one_and_update.return_value = {"_id": volunteer_id, "zip_code": "95816"}

    response = test_client.patch(
        f"/api/volunteer/{volunteer_id}",
        json={"zip_code": "95816", "choose_password": "secret9", "repeat_password": "secret9"},
    )

    assert response.status_code == 200
    updates = mock_db.volunteers.find_one_and_update.call_args[0][1]["$set"]
    assert updates["zip_code"] == "95816"
    assert verify_password("secret9", updates["choose_password"])
    assert "repeat_password" not in updates
