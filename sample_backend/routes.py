"""
HTTP routes for the sample backend API.

Every handler follows the same pipeline: parse, validate (422), run the
storage operation (404/409/401/500) and wrap the result in the success
envelope. Errors are raised as ``ApiError`` subclasses and rendered by the
handlers registered in ``sample_backend.app``.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from sample_backend.config import Settings
from sample_backend.db import Database, utc_now
from sample_backend.dependencies import (
    get_app_settings,
    get_auth_service,
    get_bearer_token,
    get_database,
    get_post_repository,
)
from sample_backend.errors import ApiError
from sample_backend.posts import PostRepository
from sample_backend.schemas import (
    AuthResult,
    CurrentUser,
    DeletedPost,
    Envelope,
    Greeting,
    Health,
    LoginPayload,
    Post,
    PostPayload,
    SignupPayload,
    SumPayload,
    SumResult,
)
from sample_backend.users import AuthService
from sample_backend.validation import (
    parse_id,
    validate_login,
    validate_post,
    validate_signup,
    validate_sum,
)

router = APIRouter()

FAIL_MESSAGE = "This endpoint always fails for demo."


def ok(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data}


def _body(payload: Any) -> dict[str, Any]:
    return payload.model_dump() if payload is not None else {}


@router.get("/health", response_model=Envelope[Health])
def health(
    settings: Settings = Depends(get_app_settings),
    db: Database = Depends(get_database),
):
    return ok(
        {"service": settings.service_name, "sqlite": db.location, "now": utc_now()}
    )


@router.get("/posts", response_model=Envelope[list[Post]])
def list_posts(posts: PostRepository = Depends(get_post_repository)):
    return ok(posts.list())


@router.get("/posts/{post_id}", response_model=Envelope[Post])
def get_post(post_id: str, posts: PostRepository = Depends(get_post_repository)):
    return ok(posts.get(parse_id(post_id)))


@router.post("/posts", response_model=Envelope[Post], status_code=201)
def create_post(
    payload: Optional[PostPayload] = None,
    posts: PostRepository = Depends(get_post_repository),
):
    return ok(posts.create(validate_post(_body(payload))))


@router.put("/posts/{post_id}", response_model=Envelope[Post])
def update_post(
    post_id: str,
    payload: Optional[PostPayload] = None,
    posts: PostRepository = Depends(get_post_repository),
):
    parsed_id = parse_id(post_id)
    return ok(posts.update(parsed_id, validate_post(_body(payload))))


@router.delete("/posts/{post_id}", response_model=Envelope[DeletedPost])
def delete_post(post_id: str, posts: PostRepository = Depends(get_post_repository)):
    return ok({"id": posts.delete(parse_id(post_id))})


@router.post("/auth/signup", response_model=Envelope[AuthResult], status_code=201)
def signup(
    payload: Optional[SignupPayload] = None,
    auth: AuthService = Depends(get_auth_service),
):
    return ok(auth.signup(validate_signup(_body(payload))))


@router.post("/auth/login", response_model=Envelope[AuthResult])
def login(
    payload: Optional[LoginPayload] = None,
    auth: AuthService = Depends(get_auth_service),
):
    return ok(auth.login(validate_login(_body(payload))))


@router.get("/auth/me", response_model=Envelope[CurrentUser])
def me(
    token: Optional[str] = Depends(get_bearer_token),
    auth: AuthService = Depends(get_auth_service),
):
    return ok({"user": auth.current_user(token)})


@router.get("/greeting", response_model=Envelope[Greeting])
def greeting(name: Optional[str] = Query(None)):
    display_name = (name or "").strip() or "Guest"
    return ok({"message": f"Hello, {display_name}!", "createdAt": utc_now()})


@router.post("/sum", response_model=Envelope[SumResult])
def sum_numbers(payload: Optional[SumPayload] = None):
    numbers = validate_sum(_body(payload))
    return ok({"a": numbers.a, "b": numbers.b, "result": numbers.a + numbers.b})


@router.get("/fail")
def fail():
    raise ApiError(FAIL_MESSAGE, status_code=500)
