"""
Pydantic schemas for the sample backend.

Request bodies accept loosely typed fields: coercion and required-field
checks live in ``sample_backend.validation`` so every failure gets the
same error envelope.
"""

from __future__ import annotations

from typing import Any, Generic, Literal, TypeVar, Union

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: Literal[True] = True
    data: T


class ErrorEnvelope(BaseModel):
    success: Literal[False] = False
    error: str


class _LooseBody(BaseModel):
    model_config = ConfigDict(extra="allow")


class PostPayload(_LooseBody):
    title: Any = None
    content: Any = None


class SignupPayload(_LooseBody):
    name: Any = None
    email: Any = None
    password: Any = None


class LoginPayload(_LooseBody):
    email: Any = None
    password: Any = None


class SumPayload(_LooseBody):
    a: Any = None
    b: Any = None


class Post(BaseModel):
    id: int
    title: str
    content: str
    createdAt: str
    updatedAt: str


class DeletedPost(BaseModel):
    id: int


class User(BaseModel):
    id: int
    name: str
    email: str
    createdAt: str


class AuthResult(BaseModel):
    token: str
    user: User


class CurrentUser(BaseModel):
    user: User


class Health(BaseModel):
    service: str
    sqlite: str
    now: str


class Greeting(BaseModel):
    message: str
    createdAt: str


class SumResult(BaseModel):
    a: Union[int, float]
    b: Union[int, float]
    result: Union[int, float]
