"""Session context resolution: which owner a request acts as."""

from __future__ import annotations

import uuid

import pytest
from _helpers import make_person

from project_library_service.domain.enums import OwnerKind, Role
from project_library_service.domain.identity import OrganizationIdentity, PersonIdentity
from project_library_service.errors import Forbidden, Unauthorized
from project_library_service.services.memberships import MembershipAuthority
from project_library_service.services.organizations import OrganizationService
from project_library_service.services.session_context import SessionContextResolver


@pytest.mark.asyncio
async def test_no_claim_resolves_to_personal_owner(session):
    ada = await make_person(session, "ada")
    ctx = await SessionContextResolver(session).resolve(ada.person.id)

    assert ctx.active_owner_id == ada.personal_owner.id
    assert ctx.kind is OwnerKind.PERSON
    assert isinstance(ctx.identity, PersonIdentity)
    assert ctx.claim_honored is False


@pytest.mark.asyncio
async def test_member_can_wear_organization_owner(session):
    ada = await make_person(session, "ada")
    created = await OrganizationService(session).create_organization(
        ada.person.id, name="Acme", slug="acme"
    )

    ctx = await SessionContextResolver(session).resolve(ada.person.id, created.owner_id)
    assert ctx.active_owner_id == created.owner_id
    assert ctx.kind is OwnerKind.ORGANIZATION
    assert ctx.organization_id == created.organization.id
    assert isinstance(ctx.identity, OrganizationIdentity)
    assert ctx.identity.name == "Acme"
    assert ctx.claim_honored is True


@pytest.mark.asyncio
async def test_someone_elses_owner_falls_back_or_is_forbidden(session):
    ada = await make_person(session, "ada")
    bob = await make_person(session, "bob")
    resolver = SessionContextResolver(session)

    ctx = await resolver.resolve(bob.person.id, ada.personal_owner.id)
    assert ctx.active_owner_id == bob.personal_owner.id
    assert ctx.claim_honored is False

    with pytest.raises(Forbidden):
        await resolver.resolve(bob.person.id, ada.personal_owner.id, strict=True)


@pytest.mark.asyncio
async def test_unknown_owner_falls_back_or_is_forbidden(session):
    ada = await make_person(session, "ada")
    resolver = SessionContextResolver(session)

    ctx = await resolver.resolve(ada.person.id, uuid.uuid4())
    assert ctx.active_owner_id == ada.personal_owner.id

    with pytest.raises(Forbidden):
        await resolver.resolve(ada.person.id, uuid.uuid4(), strict=True)


@pytest.mark.asyncio
async def test_follower_role_cannot_act_for_organization(session):
    ada = await make_person(session, "ada")
    bob = await make_person(session, "bob")
    created = await OrganizationService(session).create_organization(
        ada.person.id, name="Acme", slug="acme"
    )
    membership = await MembershipAuthority(session).add_member(
        ada.person.id, created.organization.id, bob.person.id, Role.FOLLOWER
    )
    resolver = SessionContextResolver(session)

    assert await resolver.can_wear(bob.person.id, membership.owner_id) is False
    ctx = await resolver.resolve(bob.person.id, membership.owner_id)
    assert ctx.active_owner_id == bob.personal_owner.id


@pytest.mark.asyncio
async def test_removed_member_loses_organization_owner(session):
    ada = await make_person(session, "ada")
    bob = await make_person(session, "bob")
    created = await OrganizationService(session).create_organization(
        ada.person.id, name="Acme", slug="acme"
    )
    org_id = created.organization.id
    authority = MembershipAuthority(session)
    membership = await authority.add_member(ada.person.id, org_id, bob.person.id)
    bob_owner_id = membership.owner_id
    resolver = SessionContextResolver(session)
    assert await resolver.can_wear(bob.person.id, bob_owner_id) is True

    await authority.remove_member(ada.person.id, org_id, bob_owner_id)

    assert await resolver.can_wear(bob.person.id, bob_owner_id) is False
    with pytest.raises(Forbidden):
        await resolver.resolve(bob.person.id, bob_owner_id, strict=True)


@pytest.mark.asyncio
async def test_unknown_person_is_unauthorized(session):
    with pytest.raises(Unauthorized):
        await SessionContextResolver(session).resolve(uuid.uuid4())
