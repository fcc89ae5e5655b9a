"""Password hashing and JWT helpers shared by the login and reset flows."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt
from fastapi import HTTPException, Response, status

from modules.config import ConfigEnv

JWT_ALGORITHM = "HS256"
AUTH_COOKIE_NAME = "x-auth-tk"
SESSION_TOKEN_TTL = timedelta(hours=1)
RESET_TOKEN_TTL = timedelta(minutes=15)
PASSWORD_RESET_PURPOSE = "password_reset"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=10)).decode("utf-8")


def verify_password(password: Optional[str], password_hash: Optional[str]) -> bool:
    """Return True if the plain password matches the stored bcrypt hash."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def _get_secret(secret: Optional[str] = None) -> str:
    secret = secret or ConfigEnv.AUTH_JWT_SECRET
    if not secret:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="AUTH_JWT_SECRET is not configured",
        )
    return secret


def create_token(
    claims: Dict[str, Any],
    expires_in: timedelta = SESSION_TOKEN_TTL,
    secret: Optional[str] = None,
) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        **claims,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),
    }
    return jwt.encode(payload, _get_secret(secret), algorithm=JWT_ALGORITHM)


def decode_token(token: str, secret: Optional[str] = None) -> Dict[str, Any]:
    """
    Decode and verify a token.

    Raises jwt.ExpiredSignatureError / jwt.InvalidTokenError; callers map
    those to client errors.
    """
    return jwt.decode(token, _get_secret(secret), algorithms=[JWT_ALGORITHM])


def create_password_reset_token(email: str, secret: Optional[str] = None) -> str:
    return create_token(
        {"email": email, "purpose": PASSWORD_RESET_PURPOSE},
        expires_in=RESET_TOKEN_TTL,
        secret=secret,
    )


def set_auth_cookie(response: Response, token: str) -> None:
    """Attach the session token as an httpOnly cookie."""
    production = ConfigEnv.is_production()
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="none" if production else "lax",
        secure=production,
        path="/",
        max_age=int(SESSION_TOKEN_TTL.total_seconds()),
    )
