"""Two-phase actor switching.

A switch moves a session from IDLE (acting as the personal owner by default)
through PENDING to ACTIVE:

1. ``validate_switch`` checks, strictly, that the person may wear the target
   owner and hands back a short-lived switch ticket. Nothing about the
   caller's session changes yet.
2. ``commit_active_owner`` exchanges the ticket for fresh access and refresh
   tokens carrying the ``act`` claim.

No server-side state is kept between the two phases; the ticket is the
pending state. Committing re-validates, so a membership revoked in between
is caught, and committing the same ticket twice yields the same claim.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

import jwt
import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from project_library_service.auth.jwt import (
    SWITCH,
    create_access_token,
    create_refresh_token,
    create_switch_token,
    decode_token,
)
from project_library_service.db.repositories.identity import PeopleRepo
from project_library_service.domain.enums import OwnerKind, SwitchState
from project_library_service.domain.identity import SessionContext
from project_library_service.errors import Forbidden, Unauthorized
from project_library_service.services.session_context import SessionContextResolver

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PendingSwitch:
    owner_id: UUID
    kind: OwnerKind
    switch_token: str
    state: SwitchState = SwitchState.PENDING


@dataclass(frozen=True)
class ActiveSession:
    context: SessionContext
    access_token: str
    refresh_token: str
    state: SwitchState = SwitchState.ACTIVE


class ActorSwitcher:
    def __init__(self, session: AsyncSession) -> None:
        self._people = PeopleRepo(session)
        self._resolver = SessionContextResolver(session)

    async def validate_switch(self, person_id: UUID, owner_id: UUID | None) -> PendingSwitch:
        """Validate a switch request. ``None`` switches back to the personal owner."""
        ctx = await self._resolver.resolve(person_id, owner_id, strict=True)
        ticket = create_switch_token(person_id, ctx.active_owner_id)
        log.info(
            "active_owner_switch_validated",
            person_id=str(person_id),
            owner_id=str(ctx.active_owner_id),
            kind=ctx.kind.value,
        )
        return PendingSwitch(owner_id=ctx.active_owner_id, kind=ctx.kind, switch_token=ticket)

    async def commit_active_owner(self, person_id: UUID, switch_token: str) -> ActiveSession:
        try:
            payload = decode_token(switch_token, expected_type=SWITCH)
            ticket_person_id = UUID(payload["sub"])
            owner_id = UUID(payload["act"])
        except (jwt.PyJWTError, KeyError, ValueError) as exc:
            raise Unauthorized("Invalid or expired switch token") from exc

        if ticket_person_id != person_id:
            raise Forbidden("Switch token was issued to another account")

        ctx = await self._resolver.resolve(person_id, owner_id, strict=True)
        person = await self._people.get(person_id)
        if person is None:
            raise Unauthorized("Account no longer exists")

        access = create_access_token(person.id, person.email, active_owner_id=ctx.active_owner_id)
        refresh = create_refresh_token(person.id, active_owner_id=ctx.active_owner_id)
        log.info(
            "active_owner_switch_committed",
            person_id=str(person_id),
            owner_id=str(ctx.active_owner_id),
            kind=ctx.kind.value,
        )
        return ActiveSession(context=ctx, access_token=access, refresh_token=refresh)
