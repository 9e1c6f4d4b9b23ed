"""JWT token creation and verification.

Access and refresh tokens carry the person id in ``sub`` and, once a session
has been refreshed after an actor switch, the active owner id in ``act``.
Switch tokens are short-lived tickets proving an actor switch was validated
but not yet committed.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

import jwt

from project_library_service.settings import settings

ACCESS = "access"
REFRESH = "refresh"
SWITCH = "switch"


def _now_utc() -> datetime:
    return datetime.now(UTC)


def _encode(payload: dict[str, Any]) -> str:
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(
    person_id: UUID,
    email: str,
    active_owner_id: UUID | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT access token."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    now = _now_utc()
    payload: dict[str, Any] = {
        "sub": str(person_id),
        "email": email,
        "iat": now,
        "exp": now + expires_delta,
        "type": ACCESS,
    }
    if active_owner_id is not None:
        payload["act"] = str(active_owner_id)
    return _encode(payload)


def create_refresh_token(
    person_id: UUID,
    active_owner_id: UUID | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT refresh token."""
    if expires_delta is None:
        expires_delta = timedelta(days=settings.refresh_token_expire_days)
    now = _now_utc()
    payload: dict[str, Any] = {
        "sub": str(person_id),
        "iat": now,
        "exp": now + expires_delta,
        "type": REFRESH,
    }
    if active_owner_id is not None:
        payload["act"] = str(active_owner_id)
    return _encode(payload)


def create_switch_token(
    person_id: UUID,
    owner_id: UUID,
    expires_delta: timedelta | None = None,
) -> str:
    """Create the ticket handed out when an actor switch has been validated."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.switch_token_expire_minutes)
    now = _now_utc()
    payload = {
        "sub": str(person_id),
        "act": str(owner_id),
        "iat": now,
        "exp": now + expires_delta,
        "type": SWITCH,
    }
    return _encode(payload)


def decode_token(token: str, expected_type: str | None = None) -> dict:
    """Decode and verify a JWT token. Raises jwt.PyJWTError on failure."""
    payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    if expected_type is not None and payload.get("type") != expected_type:
        raise jwt.InvalidTokenError(f"Not a {expected_type} token")
    return payload
