"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging
import threading
from datetime import timedelta

from fastapi import Depends, Header, Request

from volunteer_service.auth import AuthService
from volunteer_service.config import get_settings
from volunteer_service.errors import StoreError, UnauthorizedError
from volunteer_service.store import MongoStore
from volunteer_service.todos import (
    InMemoryTodoRepository,
    MongoTodoRepository,
    TodoRepository,
)
from volunteer_service.users import (
    InMemoryUserRepository,
    MongoUserRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

# Requests resolve dependencies on threadpool workers; construction is
# serialised so every request sees the same instances.
_lock = threading.RLock()

_store: MongoStore | None = None
_todo_repository: TodoRepository | None = None
_user_repository: UserRepository | None = None
_auth_service: AuthService | None = None


def _use_in_memory() -> bool:
    settings = get_settings()
    return settings.use_in_memory_backends or not settings.mongo_uri


def get_store() -> MongoStore:
    """
    Return the process-wide Mongo handle, creating indexes on first use.

    The handle is only cached once its indexes exist, so a failure here is
    retried by the next caller.
    """
    global _store
    with _lock:
        if _store:
            return _store

        settings = get_settings()
        store = MongoStore(settings.mongo_uri, timeout_ms=settings.mongo_timeout_ms)
        try:
            store.ensure_indexes()
        except StoreError:
            store.close()
            raise
        _store = store
        return _store


def close_store() -> None:
    global _store
    with _lock:
        if _store:
            _store.close()
            _store = None


def get_todo_repository() -> TodoRepository:
    global _todo_repository
    with _lock:
        if _todo_repository:
            return _todo_repository

        if _use_in_memory():
            logger.warning("MONGO_URI not set or in-memory requested; todos are not persisted")
            _todo_repository = InMemoryTodoRepository()
        else:
            _todo_repository = MongoTodoRepository(get_store().todos)
        return _todo_repository


def get_user_repository() -> UserRepository:
    global _user_repository
    with _lock:
        if _user_repository:
            return _user_repository

        if _use_in_memory():
            logger.warning("MONGO_URI not set or in-memory requested; users are not persisted")
            _user_repository = InMemoryUserRepository()
        else:
            _user_repository = MongoUserRepository(get_store().users)
        return _user_repository


def get_auth_service() -> AuthService:
    global _auth_service
    with _lock:
        if _auth_service:
            return _auth_service

        settings = get_settings()
        _auth_service = AuthService(
            get_user_repository(),
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            token_ttl=timedelta(hours=settings.token_ttl_hours),
            bcrypt_rounds=settings.bcrypt_rounds,
        )
        return _auth_service


def get_current_email(
    request: Request,
    authorization: str | None = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
) -> str:
    """
    Resolve the caller from a bearer token, taken from the Authorization
    header or, failing that, the auth cookie set at login.
    """
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[len("bearer "):].strip()
    if not token:
        token = request.cookies.get(get_settings().auth_cookie_name)
    if not token:
        raise UnauthorizedError("missing token")
    return auth.verify_token(token)
