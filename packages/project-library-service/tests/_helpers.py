"""Shared test helpers - importable from test modules."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from project_library_service.domain.identity import SessionContext
from project_library_service.services.identity import IdentityService, Registration
from project_library_service.services.session_context import SessionContextResolver

PASSWORD = "correct-horse"


class RecordingMediaStore:
    """Media store that remembers what it was asked to release."""

    def __init__(self, fail: bool = False):
        self.released: list[tuple[UUID, str, UUID]] = []
        self.fail = fail

    async def release(self, owner_id: UUID, kind: str, content_id: UUID) -> None:
        if self.fail:
            raise OSError("media backend unavailable")
        self.released.append((owner_id, kind, content_id))


# ---------------------------------------------------------------------------
# Service helpers
# ---------------------------------------------------------------------------


async def make_person(session: AsyncSession, handle: str) -> Registration:
    return await IdentityService(session).register(
        email=f"{handle}@example.com", password=PASSWORD, handle=handle
    )


async def context_for(
    session: AsyncSession, person_id: UUID, owner_id: UUID | None = None
) -> SessionContext:
    return await SessionContextResolver(session).resolve(person_id, owner_id)


# ---------------------------------------------------------------------------
# HTTP helpers
# ---------------------------------------------------------------------------


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def signup(client: TestClient, handle: str, password: str = PASSWORD) -> dict[str, Any]:
    """Register a person and return their tokens, person id and personal owner id."""
    resp = client.post(
        "/api/v1/auth/register",
        json={
            "email": f"{handle}@example.com",
            "password": password,
            "handle": handle,
            "display_name": handle.title(),
        },
    )
    assert resp.status_code == 201, resp.text
    tokens = resp.json()
    me = client.get("/api/v1/auth/me", headers=bearer(tokens["access_token"]))
    assert me.status_code == 200, me.text
    return {
        "token": tokens["access_token"],
        "refresh_token": tokens["refresh_token"],
        "person_id": me.json()["person_id"],
        "owner_id": tokens["active_owner_id"],
    }


def create_org(client: TestClient, token: str, name: str, slug: str) -> dict[str, Any]:
    resp = client.post(
        "/api/v1/organizations", json={"name": name, "slug": slug}, headers=bearer(token)
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def act_as(client: TestClient, token: str, owner_id: str | None) -> str:
    """Run both phases of an actor switch and return the new access token."""
    pending = client.put(
        "/api/v1/session/active-owner", json={"owner_id": owner_id}, headers=bearer(token)
    )
    assert pending.status_code == 200, pending.text
    committed = client.post(
        "/api/v1/session/refresh",
        json={"switch_token": pending.json()["switch_token"]},
        headers=bearer(token),
    )
    assert committed.status_code == 200, committed.text
    return committed.json()["access_token"]
