"""Helpers for turning MongoDB documents into JSON-safe API payloads."""

from typing import Any, Dict, Iterable, Optional

from bson import ObjectId

# Credential fields never leave the API
SENSITIVE_FIELDS = frozenset({"choose_password", "confirm_password", "repeat_password", "password"})


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def serialize_doc(doc: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Make MongoDB doc JSON-serializable and strip credential fields."""
    if doc is None:
        return {}
    return {
        key: _to_jsonable(val)
        for key, val in doc.items()
        if key not in SENSITIVE_FIELDS
    }


def serialize_docs(docs: Iterable[Dict[str, Any]]) -> list:
    return [serialize_doc(doc) for doc in docs]


def parse_object_id(value: Optional[str]) -> Optional[ObjectId]:
    """Return an ObjectId for a valid hex string, else None."""
    if not value or not ObjectId.is_valid(value):
        return None
    return ObjectId(value)
