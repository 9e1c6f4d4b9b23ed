"""Organization creation and profile management."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from project_library_service.db.engine import unit_of_work
from project_library_service.db.models import OrganizationModel
from project_library_service.db.repositories.identity import (
    OrganizationsRepo,
    OwnersRepo,
    PeopleRepo,
)
from project_library_service.db.repositories.memberships import MembershipsRepo
from project_library_service.domain.enums import Role
from project_library_service.errors import BadRequest, Conflict, Forbidden, NotFound, Unauthorized
from project_library_service.services.memberships import MembershipAuthority

log = structlog.get_logger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")

PROFILE_FIELDS = ("headline", "bio", "location", "interests", "is_public")

# NOT NULL columns; a null in an update leaves the stored value alone
REQUIRED_FIELDS = ("interests", "is_public")


def normalize_slug(slug: str) -> str:
    normalized = slug.strip().lower()
    if not normalized or not SLUG_PATTERN.match(normalized):
        raise BadRequest("Slug must contain only lowercase letters, digits, and hyphens")
    return normalized


@dataclass(frozen=True)
class CreatedOrganization:
    organization: OrganizationModel
    # the creator's organization-scoped owner
    owner_id: UUID


class OrganizationService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._people = PeopleRepo(session)
        self._owners = OwnersRepo(session)
        self._organizations = OrganizationsRepo(session)
        self._memberships = MembershipsRepo(session)

    async def create_organization(
        self,
        person_id: UUID,
        name: str,
        slug: str,
        **profile: Any,
    ) -> CreatedOrganization:
        """
        Create an organization with its creator as the first OWNER.

        The personal owner, the organization, the creator's organization-scoped
        owner and the OWNER membership are written in one transaction; if any
        step fails none of them persist.
        """
        name = name.strip()
        if not name:
            raise BadRequest("Organization name is required")
        slug = normalize_slug(slug)
        person = await self._people.get(person_id)
        if person is None:
            raise Unauthorized("Account no longer exists")
        if await self._organizations.get_by_slug(slug) is not None:
            raise Conflict("Organization slug already taken")

        fields = {k: v for k, v in profile.items() if k in PROFILE_FIELDS and v is not None}
        try:
            async with unit_of_work(self._session):
                personal = await self._owners.get_or_create_personal(person)
                org = await self._organizations.create(
                    name=name, slug=slug, primary_owner_id=personal.id, **fields
                )
                owner = await self._owners.create_for_organization(person, org)
                await self._memberships.create(owner, Role.OWNER)
        except IntegrityError as exc:
            # lost a race with another request creating the same slug
            raise Conflict("Organization slug already taken") from exc

        log.info(
            "organization_created",
            organization_id=str(org.id),
            slug=slug,
            person_id=str(person_id),
            owner_id=str(owner.id),
        )
        return CreatedOrganization(organization=org, owner_id=owner.id)

    async def get_organization(self, organization_id: UUID) -> OrganizationModel:
        org = await self._organizations.get(organization_id)
        if org is None:
            raise NotFound("Organization not found")
        return org

    async def get_organization_by_slug(self, slug: str) -> OrganizationModel:
        org = await self._organizations.get_by_slug(slug.strip())
        if org is None:
            raise NotFound("Organization not found")
        return org

    async def update_organization(
        self, person_id: UUID, organization_id: UUID, **changes: Any
    ) -> OrganizationModel:
        org = await self.get_organization(organization_id)
        if not await MembershipAuthority(self._session).can_administer(person_id, organization_id):
            raise Forbidden("Only administrators can edit this organization")

        fields = {
            k: v
            for k, v in changes.items()
            if k in PROFILE_FIELDS + ("name",) and not (v is None and k in REQUIRED_FIELDS)
        }
        if "name" in fields:
            if fields["name"] is None or not fields["name"].strip():
                raise BadRequest("Organization name is required")
            fields["name"] = fields["name"].strip()
        async with unit_of_work(self._session):
            await self._organizations.update(org, **fields)

        log.info(
            "organization_updated",
            organization_id=str(organization_id),
            fields=sorted(fields),
            person_id=str(person_id),
        )
        return org
