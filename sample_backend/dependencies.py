"""
Dependency wiring for the FastAPI app.

The database is created once by ``create_app`` and stored on
``app.state``; handlers receive it (and the services built on it) here.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request

from sample_backend.config import Settings
from sample_backend.db import Database
from sample_backend.posts import PostRepository
from sample_backend.tokens import read_bearer_token
from sample_backend.users import AuthService, UserRepository


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_post_repository(db: Database = Depends(get_database)) -> PostRepository:
    return PostRepository(db)


def get_auth_service(db: Database = Depends(get_database)) -> AuthService:
    return AuthService(UserRepository(db))


def get_bearer_token(
    authorization: Optional[str] = Header(default=None),
) -> Optional[str]:
    return read_bearer_token(authorization)
