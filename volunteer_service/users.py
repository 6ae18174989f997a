"""
User repository: a MongoDB implementation and an in-memory one for tests.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Protocol

from bson import ObjectId
from pydantic import ValidationError as SchemaValidationError
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from volunteer_service.errors import ConflictError, StoreError
from volunteer_service.schemas import User

logger = logging.getLogger(__name__)


class UserRepository(Protocol):
    """Interface for user account persistence."""

    def find_by_email(self, email: str) -> Optional[User]:
        ...

    def find_by_contact(self, contact_no: str) -> Optional[User]:
        ...

    def insert(self, user: User) -> str:
        ...

    def find_by_ids(self, ids: list[ObjectId]) -> list[User]:
        ...


def _decode(doc: dict) -> User:
    try:
        return User.from_document(doc)
    except SchemaValidationError as exc:
        logger.error("Error decoding user %s: %s", doc.get("_id"), exc)
        raise StoreError(f"error decoding user {doc.get('_id')}") from exc


def _decode_all(docs: Iterable[dict]) -> list[User]:
    return [_decode(doc) for doc in docs]


class InMemoryUserRepository:
    """Simple in-memory user store for development and tests."""

    def __init__(self):
        self.docs: dict[ObjectId, dict] = {}

    def _find_one(self, field: str, value: Optional[str]) -> Optional[User]:
        for doc in self.docs.values():
            if field in doc and doc[field] == value:
                return _decode(doc)
        return None

    def find_by_email(self, email: str) -> Optional[User]:
        return self._find_one("email", email)

    def find_by_contact(self, contact_no: str) -> Optional[User]:
        return self._find_one("contactNo", contact_no)

    def insert(self, user: User) -> str:
        doc = user.to_document()
        for field in ("email", "contactNo"):
            if field in doc and self._find_one(field, doc[field]):
                raise ConflictError(f"duplicate {field}")
        oid = ObjectId()
        doc["_id"] = oid
        self.docs[oid] = doc
        return str(oid)

    def find_by_ids(self, ids: list[ObjectId]) -> list[User]:
        return _decode_all(doc for oid, doc in self.docs.items() if oid in ids)


class MongoUserRepository:
    """User persistence on the "users" collection."""

    def __init__(self, collection: Collection):
        self.collection = collection

    def _find_one(self, query: dict) -> Optional[User]:
        try:
            doc = self.collection.find_one(query)
        except PyMongoError as exc:
            logger.error("Error looking up user with %s: %s", list(query), exc)
            raise StoreError(str(exc)) from exc
        return _decode(doc) if doc else None

    def find_by_email(self, email: str) -> Optional[User]:
        return self._find_one({"email": email})

    def find_by_contact(self, contact_no: str) -> Optional[User]:
        return self._find_one({"contactNo": contact_no})

    def insert(self, user: User) -> str:
        try:
            result = self.collection.insert_one(user.to_document())
        except DuplicateKeyError as exc:
            logger.info("Unique index rejected user insert: %s", exc)
            raise ConflictError("email or contact number already exists") from exc
        except PyMongoError as exc:
            logger.error("Error inserting user: %s", exc)
            raise StoreError(str(exc)) from exc
        return str(result.inserted_id)

    def find_by_ids(self, ids: list[ObjectId]) -> list[User]:
        try:
            return _decode_all(self.collection.find({"_id": {"$in": ids}}))
        except PyMongoError as exc:
            logger.error("Error finding users: %s", exc)
            raise StoreError(str(exc)) from exc
