"""Create MongoDB indexes for query patterns and uniqueness."""

import logging
from typing import Any, List, Tuple

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase

logger = logging.getLogger(__name__)


def _key_spec_matches(existing_key: List[Tuple[str, Any]], wanted_key: List[Tuple[str, Any]]) -> bool:
    """Return True if existing index key matches wanted key (order and direction)."""
    if len(existing_key) != len(wanted_key):
        return False
    return all(
        ek[0] == wk[0] and ek[1] == wk[1]
        for ek, wk in zip(existing_key, wanted_key)
    )


async def _index_with_spec_exists(
    coll: AsyncIOMotorCollection,
    keys: List[Tuple[str, Any]],
    *,
    unique: bool = False,
) -> bool:
    """
    Return True if an index with the same key (and unique option) already exists.
    Checks by key/spec so we skip creation when MongoDB has an index under a different name.
    """
    info = await coll.index_information()
    for name, spec in info.items():
        if name == "_id_":
            continue
        existing_key = spec.get("key")
        if not existing_key:
            continue
        # index_information() returns key as list of (name, direction) e.g. [("zip_code", 1)]
        key_list = list(existing_key.items()) if hasattr(existing_key, "items") else existing_key
        if not _key_spec_matches(key_list, keys):
            continue
        if spec.get("unique", False) == unique:
            return True
    return False


async def _ensure_index(
    coll: AsyncIOMotorCollection,
    keys: List[Tuple[str, Any]],
    *,
    unique: bool = False,
    name: str,
) -> bool:
    """
    Create index only if one with the same key (and unique) does not exist.
    Return True if created, False if already existed (by any name).
    """
    if await _index_with_spec_exists(coll, keys, unique=unique):
        return False
    await coll.create_index(keys, unique=unique, name=name)
    return True


# collection -> [(keys, unique, name)]
INDEX_SPECS = {
    "agencies": [
        ([("contact_email", 1)], True, "contact_email_unique"),
        ([("location", "2dsphere")], False, "location_2dsphere"),
        ([("zip_code", 1)], False, "zip_code_1"),
        ([("status", 1)], False, "status_1"),
    ],
    "volunteers": [
        ([("contact_email", 1)], True, "contact_email_unique"),
    ],
    "admin_logins": [
        ([("email", 1)], True, "email_unique"),
    ],
    "admin_invites": [
        ([("invited_email", 1)], False, "invited_email_1"),
    ],
}


async def create_indexes(db: AsyncIOMotorDatabase) -> int:
    """
    Create indexes on all collections. Only creates when missing.
    Logs only when an index is actually created; returns the number created.

    Proximity search needs the agencies 2dsphere index; without it the geo
    pass degrades to postal matching.
    """
    total_created = 0
    for collection_name, specs in INDEX_SPECS.items():
        coll = db[collection_name]
        created = 0
        for keys, unique, name in specs:
            if await _ensure_index(coll, keys, unique=unique, name=name):
                created += 1
        if created:
            logger.info("Indexes %s.* created (%s)", collection_name, created)
        total_created += created

    logger.info("Indexes ensured for all collections (%s created this run)", total_created)
    return total_created
