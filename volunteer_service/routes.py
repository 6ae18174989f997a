"""
HTTP routes for the volunteer service API.

Todo endpoints answer errors with {"msg", "code"}; account endpoints answer
with {"error"}. Status codes are fixed per endpoint.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from volunteer_service.auth import AuthService
from volunteer_service.config import get_settings
from volunteer_service.dependencies import (
    get_auth_service,
    get_current_email,
    get_todo_repository,
)
from volunteer_service.errors import ServiceError, StoreError, UnauthorizedError
from volunteer_service.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    SignupResponse,
    Todo,
    User,
    UserProfile,
)
from volunteer_service.todos import TodoRepository

logger = logging.getLogger(__name__)

router = APIRouter()


def _message(msg: str, code: int) -> Response:
    if code == 304:
        # A 304 must not carry a body.
        return Response(status_code=304)
    return JSONResponse(status_code=code, content={"msg": msg, "code": code})


def _error(message: str, code: int) -> JSONResponse:
    return JSONResponse(status_code=code, content={"error": message})


@router.get("/healthcheck", response_model=MessageResponse)
def health_check():
    return MessageResponse(msg="Health Check", code=200)


@router.get("/todos", response_model=list[Todo], response_model_exclude_none=True)
def get_todos(repo: TodoRepository = Depends(get_todo_repository)):
    try:
        return repo.list_all()
    except StoreError as exc:
        logger.error("Error retrieving todos: %s", exc)
        return _message("Error retrieving todos", 500)


# Declared before /todos/{todo_id} so the literal paths win.
@router.get("/todos/org", response_model=list[Todo], response_model_exclude_none=True)
def get_todos_by_org(
    org_name: Optional[str] = Query(default=None, alias="orgName"),
    repo: TodoRepository = Depends(get_todo_repository),
):
    if not org_name:
        return _message("Missing 'orgName' query parameter", 400)
    try:
        return repo.list_by_organisation(org_name)
    except StoreError as exc:
        logger.error("Error retrieving todos by organisation name: %s", exc)
        return _message("Error retrieving todos", 500)


@router.get("/todos/vol", response_model=list[Todo], response_model_exclude_none=True)
def get_todos_by_vol(
    vol_type: Optional[str] = Query(default=None, alias="volType"),
    repo: TodoRepository = Depends(get_todo_repository),
):
    if not vol_type:
        return _message("Missing 'volType' query parameter", 400)
    try:
        return repo.list_by_volunteer_type(vol_type)
    except StoreError as exc:
        logger.error("Error retrieving todos by volunteer type: %s", exc)
        return _message("Error retrieving todos", 500)


@router.get("/todos/{todo_id}", response_model=Todo, response_model_exclude_none=True)
def get_todo_by_id(todo_id: str, repo: TodoRepository = Depends(get_todo_repository)):
    try:
        return repo.get_by_id(todo_id)
    except ServiceError as exc:
        logger.info("Todo lookup failed for %s: %s", todo_id, exc)
        return _message("Todo not found", 404)


@router.post("/todos/create", response_model=MessageResponse)
def create_todo(entry: Todo, repo: TodoRepository = Depends(get_todo_repository)):
    try:
        todo_id = repo.insert(entry)
    except ServiceError as exc:
        logger.error("Error creating todo: %s", exc)
        return _message("Error creating todo", 304)
    logger.info("Created todo %s", todo_id)
    return MessageResponse(msg="Successfully created todo", code=200)


@router.put("/todos/update/{todo_id}", response_model=MessageResponse)
def update_todo(
    todo_id: str, entry: Todo, repo: TodoRepository = Depends(get_todo_repository)
):
    try:
        repo.update(todo_id, entry)
    except ServiceError as exc:
        logger.error("Error updating todo %s: %s", todo_id, exc)
        return _message(str(exc), 500)
    return MessageResponse(msg="Successfully updated todo", code=200)


@router.delete("/todos/delete/{todo_id}", response_model=MessageResponse)
def delete_todo(todo_id: str, repo: TodoRepository = Depends(get_todo_repository)):
    try:
        repo.delete(todo_id)
    except ServiceError as exc:
        logger.error("Error deleting todo %s: %s", todo_id, exc)
        return _message("Error deleting todo", 304)
    return MessageResponse(msg="Successfully deleted todo", code=200)


@router.post("/signup", response_model=SignupResponse)
def signup(user: User, auth: AuthService = Depends(get_auth_service)):
    try:
        user_type = auth.signup(user)
    except ServiceError as exc:
        return _error(str(exc), 409)
    return SignupResponse(user_type=user_type)


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    """
    Verify credentials. The signed token goes into an http-only cookie,
    never into the JSON body.
    """
    try:
        profile, token, expires_at = auth.login(payload.email, payload.password)
    except UnauthorizedError as exc:
        return _error(str(exc), 401)
    except StoreError as exc:
        logger.error("Error looking up user for login: %s", exc)
        return _error("Error retrieving user", 500)

    settings = get_settings()
    response = JSONResponse(status_code=200, content=profile.model_dump(by_alias=True))
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        expires=expires_at,
        path="/",
        secure=settings.auth_cookie_secure,
        httponly=True,
    )
    return response


@router.get("/users", response_model=list[UserProfile], response_model_exclude_none=True)
def get_users_by_id(
    ids: list[str] = Query(default=[], alias="id"),
    auth: AuthService = Depends(get_auth_service),
):
    if not ids:
        return _error("Missing 'id' query parameter", 400)
    try:
        users = auth.get_users_by_id(ids)
    except ServiceError as exc:
        logger.info("User lookup failed: %s", exc)
        return _error(str(exc), 404)
    return [UserProfile.from_user(user) for user in users]


@router.get("/me", response_model=LoginResponse)
def me(
    email: str = Depends(get_current_email),
    auth: AuthService = Depends(get_auth_service),
):
    return auth.profile(email)
