"""
MongoDB connection handle exposing the service's collections.
"""

from __future__ import annotations

import logging
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from volunteer_service.config import (
    DATABASE_NAME,
    TODOS_COLLECTION,
    USERS_COLLECTION,
)
from volunteer_service.errors import StoreError, ValidationError

logger = logging.getLogger(__name__)


def parse_object_id(value: str) -> ObjectId:
    """Parse a 24-character hex identifier into an ObjectId."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError) as exc:
        raise ValidationError(f"invalid ID format: {value}") from exc


class MongoStore:
    """
    Owns a single MongoClient shared by every request. The driver pools
    connections internally, so the handle is safe for concurrent use.
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        *,
        client: Optional[MongoClient] = None,
        timeout_ms: int = 5000,
    ):
        if client is None:
            if not uri:
                raise ValueError("MONGO_URI is required for MongoStore")
            client = MongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
        self.client = client
        self.db = client[DATABASE_NAME]

    @property
    def users(self) -> Collection:
        return self.db[USERS_COLLECTION]

    @property
    def todos(self) -> Collection:
        return self.db[TODOS_COLLECTION]

    def ensure_indexes(self) -> None:
        """
        Enforce unique email and contact number at the storage layer.

        Empty fields are never written, so sparse indexes let several
        accounts omit a contact number.
        """
        try:
            self.users.create_index(
                [("email", ASCENDING)], unique=True, sparse=True, name="uniq_email"
            )
            self.users.create_index(
                [("contactNo", ASCENDING)],
                unique=True,
                sparse=True,
                name="uniq_contact_no",
            )
        except PyMongoError as exc:
            logger.exception("Failed to create user indexes")
            raise StoreError(str(exc)) from exc

    def close(self) -> None:
        self.client.close()
