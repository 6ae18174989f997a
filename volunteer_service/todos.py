"""
Todo repository: a MongoDB implementation and an in-memory one for tests.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Protocol

from bson import ObjectId
from pydantic import ValidationError as SchemaValidationError
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from volunteer_service.errors import NotFoundError, StoreError, ValidationError
from volunteer_service.schemas import Todo
from volunteer_service.store import parse_object_id

logger = logging.getLogger(__name__)


class TodoRepository(Protocol):
    """Interface for todo persistence."""

    def list_all(self) -> list[Todo]:
        ...

    def get_by_id(self, todo_id: str) -> Todo:
        ...

    def list_by_organisation(self, org_name: str) -> list[Todo]:
        ...

    def list_by_volunteer_type(self, vol_type: str) -> list[Todo]:
        ...

    def insert(self, entry: Todo) -> str:
        ...

    def update(self, todo_id: str, entry: Todo) -> None:
        ...

    def delete(self, todo_id: str) -> None:
        ...


def _prepare_insert(entry: Todo) -> dict:
    doc = entry.to_document()
    if entry.time is None:
        doc["time"] = datetime.now(timezone.utc)
    # Volunteers are only ever added through update.
    doc["volunteer"] = []
    return doc


def _decode_one(doc: dict, todo_id: str) -> Todo:
    try:
        return Todo.from_document(doc)
    except SchemaValidationError as exc:
        logger.warning("Undecodable todo %s: %s", todo_id, exc)
        raise NotFoundError(f"todo {todo_id} could not be decoded") from exc


def _decode_all(docs: Iterable[dict]) -> list[Todo]:
    todos: list[Todo] = []
    for doc in docs:
        try:
            todos.append(Todo.from_document(doc))
        except SchemaValidationError as exc:
            logger.warning("Skipping undecodable todo %s: %s", doc.get("_id"), exc)
    return todos


class InMemoryTodoRepository:
    """Simple in-memory todo store for development and tests."""

    def __init__(self):
        self.docs: dict[ObjectId, dict] = {}

    def _find(self, field: Optional[str] = None, value: Optional[str] = None) -> list[Todo]:
        docs = [
            doc
            for doc in self.docs.values()
            if field is None or doc.get(field) == value
        ]
        return _decode_all(docs)

    def list_all(self) -> list[Todo]:
        return self._find()

    def get_by_id(self, todo_id: str) -> Todo:
        try:
            oid = parse_object_id(todo_id)
        except ValidationError as exc:
            raise NotFoundError(str(exc)) from exc
        doc = self.docs.get(oid)
        if doc is None:
            raise NotFoundError(f"todo {todo_id} not found")
        return _decode_one(doc, todo_id)

    def list_by_organisation(self, org_name: str) -> list[Todo]:
        return self._find("orgName", org_name)

    def list_by_volunteer_type(self, vol_type: str) -> list[Todo]:
        return self._find("volType", vol_type)

    def insert(self, entry: Todo) -> str:
        doc = _prepare_insert(entry)
        oid = ObjectId()
        doc["_id"] = oid
        self.docs[oid] = doc
        return str(oid)

    def update(self, todo_id: str, entry: Todo) -> None:
        oid = parse_object_id(todo_id)
        doc = self.docs.get(oid)
        if doc is None:
            return
        doc["task"] = entry.task or ""
        doc["completed"] = entry.completed
        doc.setdefault("volunteer", []).extend(
            v.to_document() for v in entry.volunteer
        )

    def delete(self, todo_id: str) -> None:
        oid = parse_object_id(todo_id)
        self.docs.pop(oid, None)


class MongoTodoRepository:
    """Todo persistence on the "todos" collection."""

    def __init__(self, collection: Collection):
        self.collection = collection

    def _find(self, query: dict) -> list[Todo]:
        try:
            return _decode_all(self.collection.find(query))
        except PyMongoError as exc:
            logger.error("Error finding todos with %s: %s", query, exc)
            raise StoreError(str(exc)) from exc

    def list_all(self) -> list[Todo]:
        return self._find({})

    def get_by_id(self, todo_id: str) -> Todo:
        try:
            oid = parse_object_id(todo_id)
        except ValidationError as exc:
            raise NotFoundError(str(exc)) from exc
        try:
            doc = self.collection.find_one({"_id": oid})
        except PyMongoError as exc:
            logger.error("Error fetching todo %s: %s", todo_id, exc)
            raise StoreError(str(exc)) from exc
        if doc is None:
            raise NotFoundError(f"todo {todo_id} not found")
        return _decode_one(doc, todo_id)

    def list_by_organisation(self, org_name: str) -> list[Todo]:
        return self._find({"orgName": org_name})

    def list_by_volunteer_type(self, vol_type: str) -> list[Todo]:
        return self._find({"volType": vol_type})

    def insert(self, entry: Todo) -> str:
        try:
            result = self.collection.insert_one(_prepare_insert(entry))
        except PyMongoError as exc:
            logger.error("Error inserting todo: %s", exc)
            raise StoreError(str(exc)) from exc
        return str(result.inserted_id)

    def update(self, todo_id: str, entry: Todo) -> None:
        oid = parse_object_id(todo_id)
        update = {
            "$set": {"task": entry.task or "", "completed": entry.completed},
            "$push": {
                "volunteer": {"$each": [v.to_document() for v in entry.volunteer]}
            },
        }
        try:
            self.collection.update_one({"_id": oid}, update)
        except PyMongoError as exc:
            logger.error("Error updating todo %s: %s", todo_id, exc)
            raise StoreError(str(exc)) from exc

    def delete(self, todo_id: str) -> None:
        oid = parse_object_id(todo_id)
        try:
            self.collection.delete_one({"_id": oid})
        except PyMongoError as exc:
            logger.error("Error deleting todo %s: %s", todo_id, exc)
            raise StoreError(str(exc)) from exc
