"""Organization endpoints: creation, profile, members and admins."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Response

from project_library_service.auth.deps import PrincipalDep
from project_library_service.db.models import MembershipModel, OrganizationModel
from project_library_service.domain.enums import Role
from project_library_service.domain.identity import person_identity
from project_library_service.rest.schemas import (
    AddMemberRequest,
    ChangeRoleRequest,
    CreateOrganizationRequest,
    CreateOrganizationResponse,
    MemberListResponse,
    MemberSchema,
    OrganizationSchema,
    UpdateOrganizationRequest,
    identity_to_schema,
)
from project_library_service.services.deps import (
    MembershipAuthorityDep,
    OrganizationServiceDep,
)

router = APIRouter(prefix="/organizations")


def org_to_schema(org: OrganizationModel) -> OrganizationSchema:
    """Convert an ORM OrganizationModel to the REST OrganizationSchema."""
    return OrganizationSchema(
        id=str(org.id),
        name=org.name,
        slug=org.slug,
        headline=org.headline,
        bio=org.bio,
        location=org.location,
        interests=org.interests or [],
        is_public=org.is_public,
        primary_owner_id=str(org.primary_owner_id),
        created_at=org.created_at,
        updated_at=org.updated_at,
    )


def _member_to_schema(membership: MembershipModel) -> MemberSchema:
    person = membership.owner.person if membership.owner is not None else None
    return MemberSchema(
        owner_id=str(membership.owner_id),
        role=Role(membership.role),
        person=identity_to_schema(person_identity(person)) if person is not None else None,
        joined_at=membership.created_at,
    )


@router.post("", response_model=CreateOrganizationResponse, status_code=201)
async def create_organization(
    request: CreateOrganizationRequest,
    principal: PrincipalDep,
    organizations: OrganizationServiceDep,
) -> CreateOrganizationResponse:
    """Create an organization owned by the caller."""
    created = await organizations.create_organization(
        principal.person_id,
        name=request.name,
        slug=request.slug,
        headline=request.headline,
        bio=request.bio,
        location=request.location,
        interests=request.interests,
        is_public=request.is_public,
    )
    return CreateOrganizationResponse(
        organization=org_to_schema(created.organization),
        owner_id=str(created.owner_id),
    )


@router.get("/by-slug/{slug}", response_model=OrganizationSchema)
async def get_organization_by_slug(
    slug: str, organizations: OrganizationServiceDep
) -> OrganizationSchema:
    return org_to_schema(await organizations.get_organization_by_slug(slug))


@router.get("/{organization_id}", response_model=OrganizationSchema)
async def get_organization(
    organization_id: UUID, organizations: OrganizationServiceDep
) -> OrganizationSchema:
    return org_to_schema(await organizations.get_organization(organization_id))


@router.patch("/{organization_id}", response_model=OrganizationSchema)
async def update_organization(
    organization_id: UUID,
    request: UpdateOrganizationRequest,
    principal: PrincipalDep,
    organizations: OrganizationServiceDep,
) -> OrganizationSchema:
    org = await organizations.update_organization(
        principal.person_id, organization_id, **request.model_dump(exclude_unset=True)
    )
    return org_to_schema(org)


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------


@router.get("/{organization_id}/members", response_model=MemberListResponse)
async def list_members(
    organization_id: UUID, memberships: MembershipAuthorityDep
) -> MemberListResponse:
    members = await memberships.list_members(organization_id)
    return MemberListResponse(members=[_member_to_schema(m) for m in members])


@router.post("/{organization_id}/members", response_model=MemberSchema, status_code=201)
async def add_member(
    organization_id: UUID,
    request: AddMemberRequest,
    principal: PrincipalDep,
    memberships: MembershipAuthorityDep,
) -> MemberSchema:
    membership = await memberships.add_member(
        principal.person_id, organization_id, request.person_id, request.role
    )
    return _member_to_schema(membership)


@router.patch("/{organization_id}/members/{owner_id}", response_model=MemberSchema)
async def change_member_role(
    organization_id: UUID,
    owner_id: UUID,
    request: ChangeRoleRequest,
    principal: PrincipalDep,
    memberships: MembershipAuthorityDep,
) -> MemberSchema:
    membership = await memberships.change_role(
        principal.person_id, organization_id, owner_id, request.role
    )
    return _member_to_schema(membership)


@router.delete("/{organization_id}/members/{owner_id}", status_code=204)
async def remove_member(
    organization_id: UUID,
    owner_id: UUID,
    principal: PrincipalDep,
    memberships: MembershipAuthorityDep,
) -> Response:
    await memberships.remove_member(principal.person_id, organization_id, owner_id)
    return Response(status_code=204)


@router.get("/{organization_id}/admins", response_model=MemberListResponse)
async def list_admins(
    organization_id: UUID,
    principal: PrincipalDep,
    memberships: MembershipAuthorityDep,
) -> MemberListResponse:
    admins = await memberships.list_admins(organization_id, principal.person_id)
    return MemberListResponse(members=[_member_to_schema(m) for m in admins])
