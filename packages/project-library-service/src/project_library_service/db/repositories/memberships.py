"""Repository for organization memberships."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from project_library_service.db.models import MembershipModel, OrganizationModel, OwnerModel
from project_library_service.domain.enums import Role

# OWNER first, FOLLOWER last
_ROLE_ORDER = case(
    {role.value: -role.rank for role in Role},
    value=MembershipModel.role,
    else_=0,
)


class MembershipsRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, owner: OwnerModel, role: Role) -> MembershipModel:
        membership = MembershipModel(
            owner_id=owner.id,
            organization_id=owner.organization_id,
            role=role.value,
        )
        membership.owner = owner
        self._session.add(membership)
        await self._session.flush()
        return membership

    async def get_by_owner(self, owner_id: UUID) -> MembershipModel | None:
        result = await self._session.execute(
            select(MembershipModel).where(MembershipModel.owner_id == owner_id)
        )
        return result.scalars().first()

    async def get_for_person(
        self, person_id: UUID, organization_id: UUID
    ) -> MembershipModel | None:
        result = await self._session.execute(
            select(MembershipModel)
            .join(OwnerModel, OwnerModel.id == MembershipModel.owner_id)
            .where(
                OwnerModel.person_id == person_id,
                MembershipModel.organization_id == organization_id,
            )
        )
        return result.scalars().first()

    async def count_with_role(self, organization_id: UUID, role: Role) -> int:
        result = await self._session.execute(
            select(func.count())
            .select_from(MembershipModel)
            .where(
                MembershipModel.organization_id == organization_id,
                MembershipModel.role == role.value,
            )
        )
        return result.scalar_one()

    async def list_for_organization(
        self, organization_id: UUID, roles: tuple[Role, ...] | None = None
    ) -> list[MembershipModel]:
        query = select(MembershipModel).where(
            MembershipModel.organization_id == organization_id
        )
        if roles:
            query = query.where(MembershipModel.role.in_([r.value for r in roles]))
        query = query.order_by(_ROLE_ORDER, MembershipModel.created_at)
        result = await self._session.execute(query)
        return list(result.scalars().all())

    async def list_for_person(
        self, person_id: UUID
    ) -> list[tuple[MembershipModel, OrganizationModel]]:
        result = await self._session.execute(
            select(MembershipModel, OrganizationModel)
            .join(OwnerModel, OwnerModel.id == MembershipModel.owner_id)
            .join(OrganizationModel, OrganizationModel.id == MembershipModel.organization_id)
            .where(OwnerModel.person_id == person_id)
            .order_by(_ROLE_ORDER, OrganizationModel.name)
        )
        return [(m, o) for m, o in result.all()]

    async def set_role(self, membership: MembershipModel, role: Role) -> MembershipModel:
        membership.role = role.value
        await self._session.flush()
        return membership

    async def delete(self, membership: MembershipModel) -> None:
        await self._session.delete(membership)
        await self._session.flush()
