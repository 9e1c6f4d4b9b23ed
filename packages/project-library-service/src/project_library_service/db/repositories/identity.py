"""Repositories for people, organizations and the owners that act for them."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from project_library_service.db.models import OrganizationModel, OwnerModel, PersonModel
from project_library_service.domain.enums import OwnerKind, OwnerStatus


class PeopleRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        email: str,
        handle: str,
        password_hash: str,
        display_name: str | None = None,
    ) -> PersonModel:
        person = PersonModel(
            email=email,
            handle=handle,
            password_hash=password_hash,
            display_name=display_name,
        )
        self._session.add(person)
        await self._session.flush()
        return person

    async def get(self, person_id: UUID) -> PersonModel | None:
        return await self._session.get(PersonModel, person_id)

    async def get_by_email(self, email: str) -> PersonModel | None:
        result = await self._session.execute(
            select(PersonModel).where(PersonModel.email == email)
        )
        return result.scalars().first()

    async def get_by_handle(self, handle: str) -> PersonModel | None:
        result = await self._session.execute(
            select(PersonModel).where(func.lower(PersonModel.handle) == handle.lower())
        )
        return result.scalars().first()

    async def update(self, person: PersonModel, **fields: Any) -> PersonModel:
        for key, value in fields.items():
            setattr(person, key, value)
        await self._session.flush()
        return person

    async def find_by_email_or_handle(self, email: str, handle: str) -> PersonModel | None:
        result = await self._session.execute(
            select(PersonModel).where(
                or_(PersonModel.email == email, func.lower(PersonModel.handle) == handle.lower())
            )
        )
        return result.scalars().first()


class OwnersRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, owner_id: UUID) -> OwnerModel | None:
        return await self._session.get(OwnerModel, owner_id)

    async def get_personal(self, person_id: UUID) -> OwnerModel | None:
        result = await self._session.execute(
            select(OwnerModel).where(
                OwnerModel.person_id == person_id,
                OwnerModel.organization_id.is_(None),
            )
        )
        return result.scalars().first()

    async def create_personal(self, person: PersonModel) -> OwnerModel:
        owner = OwnerModel(
            person=person,
            organization=None,
            kind=OwnerKind.PERSON.value,
            status=OwnerStatus.ACTIVE.value,
        )
        self._session.add(owner)
        await self._session.flush()
        return owner

    async def get_or_create_personal(self, person: PersonModel) -> OwnerModel:
        existing = await self.get_personal(person.id)
        if existing is not None:
            return existing
        return await self.create_personal(person)

    async def get_for_organization(
        self, person_id: UUID, organization_id: UUID
    ) -> OwnerModel | None:
        result = await self._session.execute(
            select(OwnerModel).where(
                OwnerModel.person_id == person_id,
                OwnerModel.organization_id == organization_id,
            )
        )
        return result.scalars().first()

    async def create_for_organization(
        self, person: PersonModel, organization: OrganizationModel
    ) -> OwnerModel:
        owner = OwnerModel(
            person=person,
            organization=organization,
            kind=OwnerKind.ORGANIZATION.value,
            status=OwnerStatus.ACTIVE.value,
        )
        self._session.add(owner)
        await self._session.flush()
        return owner

    async def set_status(self, owner: OwnerModel, status: OwnerStatus) -> OwnerModel:
        owner.status = status.value
        await self._session.flush()
        return owner

    async def list_for_person(self, person_id: UUID) -> list[OwnerModel]:
        """Personal owner first, then organization owners by creation."""
        result = await self._session.execute(
            select(OwnerModel)
            .where(OwnerModel.person_id == person_id)
            .order_by(OwnerModel.organization_id.is_not(None), OwnerModel.created_at)
        )
        return list(result.scalars().all())


class OrganizationsRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self, name: str, slug: str, primary_owner_id: UUID, **profile: Any
    ) -> OrganizationModel:
        org = OrganizationModel(
            name=name,
            slug=slug,
            primary_owner_id=primary_owner_id,
            **profile,
        )
        self._session.add(org)
        await self._session.flush()
        return org

    async def get(self, organization_id: UUID) -> OrganizationModel | None:
        return await self._session.get(OrganizationModel, organization_id)

    async def get_for_update(self, organization_id: UUID) -> OrganizationModel | None:
        """Load and row-lock an organization for the rest of the transaction."""
        result = await self._session.execute(
            select(OrganizationModel)
            .where(OrganizationModel.id == organization_id)
            .with_for_update()
        )
        return result.scalars().first()

    async def get_by_slug(self, slug: str) -> OrganizationModel | None:
        result = await self._session.execute(
            select(OrganizationModel).where(func.lower(OrganizationModel.slug) == slug.lower())
        )
        return result.scalars().first()

    async def update(self, org: OrganizationModel, **fields: Any) -> OrganizationModel:
        for key, value in fields.items():
            if hasattr(org, key):
                setattr(org, key, value)
        await self._session.flush()
        return org
