import os
from typing import List, Optional, Tuple
from dotenv import load_dotenv

# Load environment variables (single place for the app)
load_dotenv()


def convert_to_float(value: Optional[str]) -> Optional[float]:
    return float(value) if value is not None else None


def convert_to_int(value: Optional[str]) -> Optional[int]:
    return int(value) if value is not None else None


def convert_to_bool(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    return value.strip().lower() in {"true", "1", "yes", "y"}


def convert_to_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class ConfigEnv:
    # ----- App -----
    APP_ENV = os.getenv("APP_ENV", os.getenv("NODE_ENV", "development"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
    LOGO_URL = os.getenv("LOGO_URL")
    AGENCY_INVITE_BASE_URL = os.getenv("AGENCY_INVITE_BASE_URL", "http://localhost:3000/v/agency")
    CORS_ALLOWED_ORIGINS = convert_to_list(os.getenv("CORS_ALLOWED_ORIGINS"))

    # ----- Auth -----
    AUTH_JWT_SECRET = os.getenv("AUTH_JWT_SECRET") or os.getenv("JWT_SECRET")
    ADMIN_SEED_ACCOUNTS = os.getenv("ADMIN_SEED_ACCOUNTS", "")

    # ----- MongoDB -----
    MONGODB_URL = os.getenv("MONGODB_URL", os.getenv("MONGO_URI", "mongodb://localhost:27017"))
    MONGODB_DB_NAME = os.getenv("MONGODB_DB_NAME", "fostertoys")
    MONGODB_SERVER_SELECTION_TIMEOUT_MS = convert_to_int(os.getenv("MONGODB_SERVER_SELECTION_TIMEOUT_MS", "5000")) or 5000

    # ----- Geocoding -----
    GEOCODER_PROVIDER = os.getenv("GEOCODER_PROVIDER", "nominatim")
    GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY")
    GEOCODER_USER_AGENT = os.getenv(
        "GEOCODER_USER_AGENT", "fostertoys-api/1.0 (https://fostertoys.org/contact)"
    )
    GEOCODER_TIMEOUT_SECONDS = convert_to_float(os.getenv("GEOCODER_TIMEOUT_SECONDS", "10")) or 10.0

    # ----- Search -----
    DEFAULT_SEARCH_RADIUS_MILES = convert_to_float(os.getenv("DEFAULT_SEARCH_RADIUS_MILES", "30")) or 30.0

    # ----- Mail -----
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = convert_to_int(os.getenv("SMTP_PORT", "587")) or 587
    SMTP_SECURE = convert_to_bool(os.getenv("SMTP_SECURE", "false"))
    SMTP_USER = os.getenv("SMTP_USER")
    SMTP_PASS = os.getenv("SMTP_PASS")
    GMAIL_USER = os.getenv("GMAIL_USER")
    GMAIL_APP_PASSWORD = os.getenv("GMAIL_APP_PASSWORD")
    SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL", '"Foster Toys" <support@fostertoys.org>')

    REQUIRED = [
        "MONGODB_URL",
        "AUTH_JWT_SECRET",
    ]

    @classmethod
    def is_production(cls) -> bool:
        return (cls.APP_ENV or "").strip().lower() == "production"

    @classmethod
    def get_logo_url(cls) -> str:
        """Return LOGO_URL or the frontend-hosted logo fallback."""
        return cls.LOGO_URL or f"{cls.FRONTEND_URL}/logo.png"

    @classmethod
    def get_cors_origins(cls) -> List[str]:
        origins = [
            "http://localhost:3000",
            "https://fostertoys.org",
            "https://www.fostertoys.org",
            "https://api.fostertoys.org",
        ]
        for origin in [cls.FRONTEND_URL, *cls.CORS_ALLOWED_ORIGINS]:
            if origin and origin not in origins:
                origins.append(origin)
        return origins

    @classmethod
    def get_admin_seed_accounts(cls) -> List[Tuple[str, str]]:
        """Parse ADMIN_SEED_ACCOUNTS ("email:password,email:password")."""
        accounts = []
        for entry in convert_to_list(cls.ADMIN_SEED_ACCOUNTS):
            email, sep, password = entry.partition(":")
            if sep and email.strip() and password:
                accounts.append((email.strip().lower(), password))
        return accounts

    @classmethod
    def validate(cls) -> None:
        missing = [key for key in cls.REQUIRED if getattr(cls, key) is None]
        if missing:
            raise RuntimeError(f"Missing required env vars: {', '.join(missing)}")
