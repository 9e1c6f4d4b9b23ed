"""FastAPI auth dependencies."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends, Request

from project_library_service.auth.jwt import ACCESS, decode_token
from project_library_service.auth.models import Principal
from project_library_service.db.deps import SessionDep
from project_library_service.domain.identity import SessionContext
from project_library_service.errors import Unauthorized
from project_library_service.services.session_context import SessionContextResolver


def _principal_from_token(token: str) -> Principal:
    """Decode a Bearer JWT and return the Principal it names."""
    try:
        payload = decode_token(token, expected_type=ACCESS)
    except jwt.PyJWTError as exc:
        raise Unauthorized("Invalid or expired token") from exc

    try:
        person_id = UUID(payload["sub"])
        act = payload.get("act")
        active_owner_id = UUID(act) if act else None
    except (KeyError, ValueError) as exc:
        raise Unauthorized("Malformed token payload") from exc

    return Principal(
        person_id=person_id,
        email=payload.get("email", ""),
        active_owner_id=active_owner_id,
    )


async def get_principal(request: Request) -> Principal:
    """Resolve the authenticated person from ``Authorization: Bearer <token>``."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise Unauthorized("Authentication required")
    token = auth_header.removeprefix("Bearer ").strip()
    return _principal_from_token(token)


PrincipalDep = Annotated[Principal, Depends(get_principal)]


async def get_session_context(principal: PrincipalDep, session: SessionDep) -> SessionContext:
    """
    Resolve the owner this request acts as.

    The ``act`` claim is re-validated against the database on every request;
    a claim that no longer holds falls back to the personal owner.
    """
    resolver = SessionContextResolver(session)
    return await resolver.resolve(principal.person_id, principal.active_owner_id)


SessionContextDep = Annotated[SessionContext, Depends(get_session_context)]
