"""
Request payload validation.

Validators are pure: they normalize the incoming values and either return
a small value object or raise ``ValidationError``.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from sample_backend.errors import ValidationError

Number = Union[int, float]

_ID_PATTERN = re.compile(r"^[+-]?\d+$")


@dataclass(frozen=True)
class PostInput:
    title: str
    content: str


@dataclass(frozen=True)
class SignupInput:
    name: str
    email: str
    password: str


@dataclass(frozen=True)
class LoginInput:
    email: str
    password: str


@dataclass(frozen=True)
class SumInput:
    a: Number
    b: Number


def _text(value: Any) -> str:
    # Structured values are treated the same as a missing field.
    if value is None or value is False or isinstance(value, (dict, list)):
        return ""
    if value is True:
        return "true"
    return str(value).strip()


def _number(value: Any) -> Optional[Number]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def validate_post(body: Optional[Mapping[str, Any]]) -> PostInput:
    body = body or {}
    title = _text(body.get("title"))
    content = _text(body.get("content"))
    if not title:
        raise ValidationError("title is required.")
    if not content:
        raise ValidationError("content is required.")
    return PostInput(title=title, content=content)


def validate_signup(body: Optional[Mapping[str, Any]]) -> SignupInput:
    body = body or {}
    name = _text(body.get("name"))
    email = _text(body.get("email")).lower()
    password = _text(body.get("password"))
    if not name or not email or not password:
        raise ValidationError("name, email, password are required.")
    return SignupInput(name=name, email=email, password=password)


def validate_login(body: Optional[Mapping[str, Any]]) -> LoginInput:
    body = body or {}
    email = _text(body.get("email")).lower()
    password = _text(body.get("password"))
    if not email or not password:
        raise ValidationError("email and password are required.")
    return LoginInput(email=email, password=password)


def validate_sum(body: Optional[Mapping[str, Any]]) -> SumInput:
    body = body or {}
    a = _number(body.get("a"))
    b = _number(body.get("b"))
    if a is None or b is None:
        raise ValidationError("a and b must be numbers.")
    return SumInput(a=a, b=b)


def parse_id(raw: Any) -> int:
    """Parse a path id; only plain decimal integers are accepted."""
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and _ID_PATTERN.match(raw.strip()):
        return int(raw.strip())
    raise ValidationError("Invalid id.")
