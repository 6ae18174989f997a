"""
Pydantic schemas for the volunteer service.

Field names follow Python conventions; aliases carry the camelCase names used
both on the wire and in stored documents.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field


def _compact(values: dict) -> dict:
    """Drop empty values the way the stored documents omit them."""
    return {k: v for k, v in values.items() if v is not None and v != ""}


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # MongoDB hands back naive datetimes that are implicitly UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Volunteer(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    volunteer_id: Optional[str] = Field(default=None, alias="volunteerId")
    volunteer_name: Optional[str] = Field(default=None, alias="volunteerName")

    def to_document(self) -> dict:
        return _compact(self.model_dump(by_alias=True))


class Todo(BaseModel):
    """
    A volunteer task. Collection name: "todos".

    `volunteer` holds denormalised snapshots of the people who signed up.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    task: Optional[str] = None
    description: Optional[str] = None
    org_name: Optional[str] = Field(default=None, alias="orgName")
    vol_type: Optional[str] = Field(default=None, alias="volType")
    org_type: Optional[str] = Field(default=None, alias="orgType")
    completed: bool = False
    time: Optional[datetime] = None
    volunteer: list[Volunteer] = Field(default_factory=list)

    def to_document(self) -> dict:
        doc = _compact(
            self.model_dump(by_alias=True, exclude={"id", "volunteer"})
        )
        doc["completed"] = self.completed
        doc["volunteer"] = [v.to_document() for v in self.volunteer]
        return doc

    @classmethod
    def from_document(cls, doc: dict) -> "Todo":
        data = dict(doc)
        _id = data.pop("_id", None)
        if _id is not None:
            data["id"] = str(_id)
        data["volunteer"] = data.get("volunteer") or []
        todo = cls.model_validate(data)
        todo.time = _as_utc(todo.time)
        return todo


class User(BaseModel):
    """
    An account. Collection name: "users".

    `password` holds the plaintext only on the way in; what gets stored is
    the bcrypt hash.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    email: Optional[str] = None
    password: Optional[str] = None
    contact_no: Optional[str] = Field(default=None, alias="contactNo")
    user_type: Optional[str] = Field(default=None, alias="userType")
    vol_type: Optional[str] = Field(default=None, alias="volType")
    org_name: str = Field(default="", alias="orgName")

    def to_document(self) -> dict:
        doc = _compact(self.model_dump(by_alias=True, exclude={"id"}))
        doc["orgName"] = self.org_name
        return doc

    @classmethod
    def from_document(cls, doc: dict) -> "User":
        data = dict(doc)
        _id = data.pop("_id", None)
        if isinstance(_id, ObjectId):
            data["id"] = str(_id)
        elif _id is not None:
            data["id"] = _id
        return cls.model_validate(data)


class UserProfile(BaseModel):
    """User as returned to API callers, without the password hash."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    email: Optional[str] = None
    contact_no: Optional[str] = Field(default=None, alias="contactNo")
    user_type: Optional[str] = Field(default=None, alias="userType")
    vol_type: Optional[str] = Field(default=None, alias="volType")
    org_name: str = Field(default="", alias="orgName")

    @classmethod
    def from_user(cls, user: User) -> "UserProfile":
        return cls.model_validate(user.model_dump(exclude={"password"}))


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_type: str = Field(default="", alias="userType")
    id: str = Field(default="", alias="ID")
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    contact_no: str = Field(default="", alias="contactNo")
    email: str = ""
    org_name: str = Field(default="", alias="orgName")

    @classmethod
    def from_user(cls, user: User) -> "LoginResponse":
        return cls(
            user_type=user.user_type or "",
            id=user.id or "",
            first_name=user.first_name or "",
            last_name=user.last_name or "",
            contact_no=user.contact_no or "",
            email=user.email or "",
            org_name=user.org_name,
        )


class SignupResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_type: str = Field(alias="userType")


class MessageResponse(BaseModel):
    msg: str
    code: int
