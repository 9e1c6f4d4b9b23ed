"""Resolve which owner a request acts as.

Every mutating operation works from a ``SessionContext``. A token may claim an
active owner, but the claim is only honored after checking, against the
database, that the caller may wear that owner right now:

* the owner exists and was minted for this person,
* the owner is ACTIVE,
* an organization-scoped owner still has a membership of MEMBER or above.

Ordinary requests carrying a stale claim fall back to the personal owner.
Explicit switch requests (``strict=True``) are rejected instead.
"""

from __future__ import annotations

from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from project_library_service.db.models import OwnerModel
from project_library_service.db.repositories.identity import OwnersRepo, PeopleRepo
from project_library_service.db.repositories.memberships import MembershipsRepo
from project_library_service.domain.enums import OwnerKind, OwnerStatus, Role
from project_library_service.domain.identity import SessionContext, describe_owner
from project_library_service.errors import Forbidden, ServerError, Unauthorized

log = structlog.get_logger(__name__)


class SessionContextResolver:
    def __init__(self, session: AsyncSession) -> None:
        self._people = PeopleRepo(session)
        self._owners = OwnersRepo(session)
        self._memberships = MembershipsRepo(session)

    async def resolve(
        self,
        person_id: UUID,
        requested_owner_id: UUID | None = None,
        strict: bool = False,
    ) -> SessionContext:
        person = await self._people.get(person_id)
        if person is None:
            raise Unauthorized("Account no longer exists")

        if requested_owner_id is not None:
            owner, reason = await self._wearable(person_id, requested_owner_id)
            if owner is not None:
                return self._context(person_id, owner, claim_honored=True)
            if strict:
                raise Forbidden("You cannot act as this owner")
            log.warning(
                "active_owner_claim_rejected",
                person_id=str(person_id),
                owner_id=str(requested_owner_id),
                reason=reason,
            )

        personal = await self._owners.get_personal(person_id)
        if personal is None:
            log.error("personal_owner_missing", person_id=str(person_id))
            raise ServerError()
        return self._context(person_id, personal)

    async def can_wear(self, person_id: UUID, owner_id: UUID) -> bool:
        owner, _ = await self._wearable(person_id, owner_id)
        return owner is not None

    async def _wearable(
        self, person_id: UUID, owner_id: UUID
    ) -> tuple[OwnerModel | None, str | None]:
        owner = await self._owners.get(owner_id)
        if owner is None:
            return None, "not_found"
        if owner.person_id != person_id:
            return None, "not_owned"
        if owner.status != OwnerStatus.ACTIVE.value:
            return None, "inactive"
        if owner.kind == OwnerKind.ORGANIZATION.value:
            membership = await self._memberships.get_by_owner(owner.id)
            if membership is None or not Role(membership.role).at_least(Role.MEMBER):
                return None, "insufficient_role"
        if describe_owner(owner) is None:
            return None, "unresolvable"
        return owner, None

    @staticmethod
    def _context(person_id: UUID, owner: OwnerModel, claim_honored: bool = False) -> SessionContext:
        identity = describe_owner(owner)
        if identity is None:
            log.error("owner_identity_missing", owner_id=str(owner.id))
            raise ServerError()
        return SessionContext(
            person_id=person_id,
            active_owner_id=owner.id,
            active_owner=owner,
            identity=identity,
            claim_honored=claim_honored,
        )
