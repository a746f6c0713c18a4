"""
MongoDB connection for the storefront

Reads DATABASE_URL / DATABASE_NAME from the environment. When no URL is set,
`db` is None and callers report the store as unavailable.
"""
import logging
import os
from typing import Any, Optional

from pymongo import MongoClient
from pymongo.database import Database

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 5000


def collaborator_timeout_ms() -> int:
    return int(os.getenv("COLLABORATOR_TIMEOUT_MS", DEFAULT_TIMEOUT_MS))


def connect() -> Optional[Database]:
    database_url = os.getenv("DATABASE_URL")
    database_name = os.getenv("DATABASE_NAME", "storefront")
    if not database_url:
        logger.warning("DATABASE_URL not set; storefront collections are unavailable")
        return None
    timeout = collaborator_timeout_ms()
    client = MongoClient(
        database_url,
        serverSelectionTimeoutMS=timeout,
        socketTimeoutMS=timeout,
    )
    return client[database_name]


db = connect()


def get_documents(database: Database, collection_name: str, filter_dict: Optional[dict] = None, limit: int = 0) -> list[dict[str, Any]]:
    cursor = database[collection_name].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)
