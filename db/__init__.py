"""Database module: MongoDB connection and utilities."""

from .connection import get_db, get_client, close_client, ping, DB_NAME
from .indexes import create_indexes
from .serialize import serialize_doc, serialize_docs, parse_object_id

__all__ = [
    "get_db",
    "get_client",
    "close_client",
    "ping",
    "DB_NAME",
    "create_indexes",
    "serialize_doc",
    "serialize_docs",
    "parse_object_id",
]
