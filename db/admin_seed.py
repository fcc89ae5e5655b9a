"""Seed administrator logins from configuration."""

import logging
from typing import Iterable, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from db.schemas import AdminLogin
from services.security import hash_password

logger = logging.getLogger(__name__)


async def seed_admins(
    db: AsyncIOMotorDatabase,
    accounts: Iterable[Tuple[str, str]],
) -> int:
    """
    Insert an admin_logins document for every (email, password) pair that
    does not exist yet. Existing admins keep their current password.
    Returns the number of admins created.
    """
    created = 0
    for email, password in accounts:
        existing = await db.admin_logins.find_one({"email": email})
        if existing:
            continue
        admin = AdminLogin(email=email, password=hash_password(password))
        await db.admin_logins.insert_one(admin.to_document())
        logger.info(f"Added admin: {email}")
        created += 1
    return created
