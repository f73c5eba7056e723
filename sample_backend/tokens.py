"""
Opaque bearer tokens.

A token is the unpadded base64url form of ``"<id>:<email>:<issued-ms>"``.
It is NOT signed and carries no expiry: anyone can read or forge one, so
it is demo-grade only. Callers must still check the decoded identity
against the users table.
"""

from __future__ import annotations

import base64
import binascii
import re
import time
from dataclasses import dataclass
from typing import Optional

BEARER_PREFIX = "Bearer "

_ID_PATTERN = re.compile(r"^-?\d+$")
# User ids are SQLite INTEGERs (signed 64-bit).
_MAX_ID = 2**63 - 1


@dataclass(frozen=True)
class TokenClaims:
    id: int
    email: str


def encode_token(user_id: int, email: str, issued_at_ms: Optional[int] = None) -> str:
    if issued_at_ms is None:
        issued_at_ms = int(time.time() * 1000)
    raw = f"{user_id}:{email}:{issued_at_ms}".encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_token(token: Optional[str]) -> Optional[TokenClaims]:
    """Return the claims inside ``token``, or None if it cannot be parsed."""
    if not token:
        return None
    try:
        padded = token + "=" * (-len(token) % 4)
        decoded = base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError):
        return None

    parts = decoded.split(":")
    id_raw = parts[0]
    email = parts[1] if len(parts) > 1 else ""
    if not _ID_PATTERN.match(id_raw) or not email:
        return None
    user_id = int(id_raw)
    if not -_MAX_ID - 1 <= user_id <= _MAX_ID:
        return None
    return TokenClaims(id=user_id, email=email)


def read_bearer_token(header: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization`` header value."""
    header = header or ""
    if not header.startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX):].strip()
    return token or None
