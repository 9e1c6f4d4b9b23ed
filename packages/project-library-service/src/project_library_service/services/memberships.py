"""Membership & role authority for organizations.

Roles are ordered OWNER > ADMIN > MEMBER > FOLLOWER. Every mutation here keeps
at least one OWNER membership per organization; the check runs while the
organization row is locked so two concurrent demotions cannot both pass it.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from project_library_service.db.engine import unit_of_work
from project_library_service.db.models import MembershipModel, OrganizationModel
from project_library_service.db.repositories.identity import (
    OrganizationsRepo,
    OwnersRepo,
    PeopleRepo,
)
from project_library_service.db.repositories.memberships import MembershipsRepo
from project_library_service.domain.enums import OwnerStatus, Role
from project_library_service.errors import Conflict, Forbidden, NotFound

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OrganizationMembership:
    """An organization a person belongs to, as shown in the actor switcher."""

    organization: OrganizationModel
    owner_id: UUID
    role: Role


class MembershipAuthority:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._people = PeopleRepo(session)
        self._owners = OwnersRepo(session)
        self._organizations = OrganizationsRepo(session)
        self._memberships = MembershipsRepo(session)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def role_of(self, person_id: UUID, organization_id: UUID) -> Role | None:
        membership = await self._memberships.get_for_person(person_id, organization_id)
        if membership is None:
            return None
        return Role(membership.role)

    async def can_act_as(self, person_id: UUID, organization_id: UUID) -> bool:
        role = await self.role_of(person_id, organization_id)
        return role is not None and role.at_least(Role.MEMBER)

    async def can_administer(self, person_id: UUID, organization_id: UUID) -> bool:
        role = await self.role_of(person_id, organization_id)
        return role is not None and role.at_least(Role.ADMIN)

    async def list_members(self, organization_id: UUID) -> list[MembershipModel]:
        await self._require_organization(organization_id)
        return await self._memberships.list_for_organization(organization_id)

    async def list_admins(
        self, organization_id: UUID, requester_person_id: UUID
    ) -> list[MembershipModel]:
        await self._require_organization(organization_id)
        if not await self.can_act_as(requester_person_id, organization_id):
            raise Forbidden("Only members can view the administrators")
        return await self._memberships.list_for_organization(
            organization_id, roles=(Role.OWNER, Role.ADMIN)
        )

    async def organizations_for(self, person_id: UUID) -> list[OrganizationMembership]:
        rows = await self._memberships.list_for_person(person_id)
        return [
            OrganizationMembership(
                organization=org, owner_id=membership.owner_id, role=Role(membership.role)
            )
            for membership, org in rows
        ]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add_member(
        self,
        requester_person_id: UUID,
        organization_id: UUID,
        person_id: UUID,
        role: Role = Role.MEMBER,
    ) -> MembershipModel:
        """Give a person an organization-scoped owner and a membership."""
        org = await self._require_organization(organization_id)
        person = await self._people.get(person_id)
        if person is None:
            raise NotFound("Person not found")

        requester_role = await self.role_of(requester_person_id, organization_id)
        if requester_role is None or not requester_role.at_least(Role.ADMIN):
            raise Forbidden("Only administrators can add members")
        if role is Role.OWNER and requester_role is not Role.OWNER:
            raise Forbidden("Only owners can grant the OWNER role")

        try:
            async with unit_of_work(self._session):
                owner = await self._owners.get_for_organization(person_id, organization_id)
                if owner is not None:
                    if await self._memberships.get_by_owner(owner.id) is not None:
                        raise Conflict("Person is already a member of this organization")
                    if owner.status != OwnerStatus.ACTIVE.value:
                        await self._owners.set_status(owner, OwnerStatus.ACTIVE)
                else:
                    owner = await self._owners.create_for_organization(person, org)
                membership = await self._memberships.create(owner, role)
        except IntegrityError as exc:
            raise Conflict("Person is already a member of this organization") from exc

        log.info(
            "member_added",
            organization_id=str(organization_id),
            person_id=str(person_id),
            owner_id=str(membership.owner_id),
            role=role.value,
            added_by=str(requester_person_id),
        )
        return membership

    async def change_role(
        self,
        requester_person_id: UUID,
        organization_id: UUID,
        target_owner_id: UUID,
        new_role: Role,
    ) -> MembershipModel:
        await self._require_organization(organization_id)
        if await self.role_of(requester_person_id, organization_id) is not Role.OWNER:
            raise Forbidden("Only owners can change roles")

        async with unit_of_work(self._session):
            await self._organizations.get_for_update(organization_id)
            membership = await self._membership_in(organization_id, target_owner_id)
            previous = Role(membership.role)
            if previous is Role.OWNER and new_role is not Role.OWNER:
                await self._guard_last_owner(organization_id, "Cannot demote the last owner")
            await self._memberships.set_role(membership, new_role)

        log.info(
            "member_role_changed",
            organization_id=str(organization_id),
            owner_id=str(target_owner_id),
            previous_role=previous.value,
            role=new_role.value,
            changed_by=str(requester_person_id),
        )
        return membership

    async def remove_member(
        self,
        requester_person_id: UUID,
        organization_id: UUID,
        target_owner_id: UUID,
    ) -> None:
        """Remove a membership; the organization-scoped owner is deactivated, not deleted."""
        await self._require_organization(organization_id)
        requester_role = await self.role_of(requester_person_id, organization_id)

        async with unit_of_work(self._session):
            await self._organizations.get_for_update(organization_id)
            membership = await self._membership_in(organization_id, target_owner_id)
            owner = membership.owner
            target_role = Role(membership.role)

            if owner.person_id != requester_person_id:
                if requester_role is None or not requester_role.at_least(Role.ADMIN):
                    raise Forbidden("Only administrators can remove other members")
                if target_role is Role.OWNER and requester_role is not Role.OWNER:
                    raise Forbidden("Only owners can remove an owner")
            if target_role is Role.OWNER:
                await self._guard_last_owner(organization_id, "Cannot remove the last owner")

            await self._memberships.delete(membership)
            await self._owners.set_status(owner, OwnerStatus.INACTIVE)

        log.info(
            "member_removed",
            organization_id=str(organization_id),
            owner_id=str(target_owner_id),
            removed_by=str(requester_person_id),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _require_organization(self, organization_id: UUID) -> OrganizationModel:
        org = await self._organizations.get(organization_id)
        if org is None:
            raise NotFound("Organization not found")
        return org

    async def _membership_in(self, organization_id: UUID, owner_id: UUID) -> MembershipModel:
        membership = await self._memberships.get_by_owner(owner_id)
        if membership is None or membership.organization_id != organization_id:
            raise NotFound("Membership not found")
        return membership

    async def _guard_last_owner(self, organization_id: UUID, message: str) -> None:
        # caller holds the organization row lock
        owners = await self._memberships.count_with_role(organization_id, Role.OWNER)
        if owners <= 1:
            raise Conflict(message)
