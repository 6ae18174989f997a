"""
Account signup, login and bearer-token handling.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

from volunteer_service.errors import ConflictError, UnauthorizedError, ValidationError
from volunteer_service.schemas import LoginResponse, User
from volunteer_service.store import parse_object_id
from volunteer_service.users import UserRepository

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "invalid credentials"


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        *,
        secret: str,
        algorithm: str = "HS256",
        token_ttl: timedelta = timedelta(hours=24),
        bcrypt_rounds: int = 12,
    ):
        self.users = users
        self.secret = secret
        self.algorithm = algorithm
        self.token_ttl = token_ttl
        self.pwd_context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=bcrypt_rounds
        )

    def hash_password(self, password: str) -> str:
        try:
            return self.pwd_context.hash(password)
        except ValueError as exc:
            # bcrypt refuses some inputs, e.g. passwords containing NUL bytes.
            raise ValidationError(f"invalid password: {exc}") from exc

    def verify_password(self, plain: str, hashed: Optional[str]) -> bool:
        if not hashed:
            return False
        try:
            return self.pwd_context.verify(plain, hashed)
        except ValueError:
            # Stored value is not a recognisable hash.
            return False

    def signup(self, user: User) -> str:
        """
        Register a new account and return its user type.

        Email and contact number must both be unused. The unique indexes on
        the collection catch signups racing past these checks.
        """
        if user.email and self.users.find_by_email(user.email):
            logger.info("Signup rejected: email already exists")
            raise ConflictError("email already exists")
        if user.contact_no and self.users.find_by_contact(user.contact_no):
            logger.info("Signup rejected: contact number already exists")
            raise ConflictError("contact number already exists")

        stored = user.model_copy(
            update={"id": None, "password": self.hash_password(user.password or "")}
        )
        self.users.insert(stored)
        return user.user_type or ""

    def issue_token(self, email: str) -> tuple[str, datetime]:
        expires_at = datetime.now(timezone.utc) + self.token_ttl
        token = jwt.encode(
            {"email": email, "exp": expires_at}, self.secret, algorithm=self.algorithm
        )
        return token, expires_at

    def login(self, email: str, password: str) -> tuple[LoginResponse, str, datetime]:
        """
        Check credentials and issue a signed token.

        Unknown emails and wrong passwords fail with the same message.
        """
        user = self.users.find_by_email(email) if email else None
        if user is None:
            logger.info("Login failed: no account for email")
            raise UnauthorizedError(INVALID_CREDENTIALS)
        if not self.verify_password(password, user.password):
            logger.info("Login failed: password mismatch")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        token, expires_at = self.issue_token(user.email or "")
        return LoginResponse.from_user(user), token, expires_at

    def verify_token(self, token: str) -> str:
        """Return the email embedded in a valid, unexpired token."""
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError as exc:
            raise UnauthorizedError("invalid token") from exc
        email = claims.get("email")
        if not email:
            raise UnauthorizedError("invalid token")
        return email

    def profile(self, email: str) -> LoginResponse:
        user = self.users.find_by_email(email)
        if user is None:
            raise UnauthorizedError("user not found")
        return LoginResponse.from_user(user)

    def get_users_by_id(self, ids: list[str]) -> list[User]:
        """
        Look up several users at once. A malformed id aborts the whole batch;
        ids that match nothing are simply left out.
        """
        object_ids = []
        for value in ids:
            object_ids.append(parse_object_id(value))
        return self.users.find_by_ids(object_ids)
