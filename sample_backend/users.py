"""
User persistence and the demo authentication flow.

Passwords are stored and compared as plaintext and tokens are unsigned
(see ``sample_backend.tokens``). Do not reuse this for real accounts.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from sample_backend.db import Database, fits_integer, utc_now
from sample_backend.errors import AuthError, ConflictError, IntegrityViolation
from sample_backend.tokens import decode_token, encode_token
from sample_backend.validation import LoginInput, SignupInput

logger = logging.getLogger(__name__)

_SELECT_USER = "SELECT id, name, email, created_at AS createdAt FROM users"

EMAIL_TAKEN = "This email is already registered."
INVALID_CREDENTIALS = "Invalid email or password."
TOKEN_REQUIRED = "Bearer token is required."
INVALID_TOKEN = "Invalid token."


def public_user(row: dict[str, Any]) -> dict[str, Any]:
    """The user shape returned to clients; never includes the password."""
    return {
        "id": row["id"],
        "name": row["name"],
        "email": row["email"],
        "createdAt": row["createdAt"],
    }


class UserRepository:
    def __init__(self, db: Database, clock: Optional[Callable[[], str]] = None):
        self.db = db
        self.clock = clock or utc_now

    def get(self, user_id: int) -> Optional[dict[str, Any]]:
        if not fits_integer(user_id):
            return None
        return self.db.query_one(f"{_SELECT_USER} WHERE id = :id", {"id": user_id})

    def find_by_email(self, email: str) -> Optional[dict[str, Any]]:
        """Lookup including the stored password, for credential checks."""
        return self.db.query_one(
            "SELECT id, name, email, password, created_at AS createdAt "
            "FROM users WHERE email = :email",
            {"email": email},
        )

    def find_by_identity(self, user_id: int, email: str) -> Optional[dict[str, Any]]:
        if not fits_integer(user_id):
            return None
        return self.db.query_one(
            f"{_SELECT_USER} WHERE id = :id AND email = :email",
            {"id": user_id, "email": email},
        )

    def create(self, payload: SignupInput) -> dict[str, Any]:
        now = self.clock()
        try:
            result = self.db.execute(
                "INSERT INTO users (name, email, password, created_at, updated_at) "
                "VALUES (:name, :email, :password, :now, :now)",
                {
                    "name": payload.name,
                    "email": payload.email,
                    "password": payload.password,
                    "now": now,
                },
            )
        except IntegrityViolation as exc:
            raise ConflictError(EMAIL_TAKEN) from exc
        return self.get(result.inserted_id)


class AuthService:
    def __init__(self, users: UserRepository):
        self.users = users

    def _issue(self, user: dict[str, Any]) -> dict[str, Any]:
        return {
            "token": encode_token(user["id"], user["email"]),
            "user": public_user(user),
        }

    def signup(self, payload: SignupInput) -> dict[str, Any]:
        if self.users.find_by_email(payload.email) is not None:
            raise ConflictError(EMAIL_TAKEN)
        user = self.users.create(payload)
        logger.info("Registered user id=%s", user["id"])
        return self._issue(user)

    def login(self, payload: LoginInput) -> dict[str, Any]:
        user = self.users.find_by_email(payload.email)
        if user is None or user["password"] != payload.password:
            raise AuthError(INVALID_CREDENTIALS)
        return self._issue(user)

    def current_user(self, token: Optional[str]) -> dict[str, Any]:
        if not token:
            raise AuthError(TOKEN_REQUIRED)
        claims = decode_token(token)
        if claims is None:
            raise AuthError(INVALID_TOKEN)
        user = self.users.find_by_identity(claims.id, claims.email)
        if user is None:
            raise AuthError(INVALID_TOKEN)
        return public_user(user)
