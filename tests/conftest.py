"""Pytest configuration and fixtures for testing."""

import os

import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

# Set test environment variables before the app reads its configuration
os.environ.setdefault("AUTH_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("FRONTEND_URL", "http://localhost:3000")
os.environ.setdefault("AGENCY_INVITE_BASE_URL", "http://localhost:3000/v/agency")

from fakes import FakeAgencyStore, FakeGeocoder, mock_cursor  # noqa: E402
from services.mailer import SentMail  # noqa: E402
from services.search import AgencySearchEngine  # noqa: E402


@pytest.fixture
def fake_geocoder():
    return FakeGeocoder()


@pytest.fixture
def agency_store():
    return FakeAgencyStore([])


@pytest.fixture
def mock_db():
    """Motor-like database mock; every collection method is awaitable."""
    db = MagicMock()
    for name in ("agencies", "volunteers", "admin_logins", "admin_invites"):
        collection = getattr(db, name)
        collection.find_one = AsyncMock(return_value=None)
        collection.insert_one = AsyncMock()
        collection.update_one = AsyncMock()
        collection.find_one_and_update = AsyncMock(return_value=None)
        collection.find = MagicMock(return_value=mock_cursor([]))
    db.__getitem__.side_effect = lambda name: getattr(db, name)
    return db


@pytest.fixture
def mock_mailer():
    mailer = MagicMock()
    mailer.send_mail = AsyncMock(
        side_effect=lambda to, subject, text, html: SentMail(
            message_id="<test@fostertoys.org>", to=to, subject=subject
        )
    )
    return mailer


@pytest.fixture
def test_client(mock_db, mock_mailer, fake_geocoder, agency_store):
    """FastAPI test client with collaborators injected on app state."""
    # Import here so the environment above is in place first
    from main import app

    app.state.db = mock_db
    app.state.mailer = mock_mailer
    app.state.geocoder = fake_geocoder
    app.state.search_engine = AgencySearchEngine(agency_store, fake_geocoder)

    return TestClient(app)
