"""Follow graph semantics."""

from __future__ import annotations

import uuid

import pytest
from _helpers import context_for, make_person
from sqlalchemy import create_engine, delete

from project_library_service.db.models import OrganizationModel
from project_library_service.domain.enums import OwnerKind
from project_library_service.domain.identity import OrganizationIdentity, PersonIdentity
from project_library_service.errors import BadRequest, Conflict, NotFound
from project_library_service.services.follows import FollowGraph
from project_library_service.services.organizations import OrganizationService


@pytest.mark.asyncio
async def test_cannot_follow_self(session):
    ada = await make_person(session, "ada")
    ctx = await context_for(session, ada.person.id)

    with pytest.raises(BadRequest):
        await FollowGraph(session).follow(ctx, ctx.active_owner_id)


@pytest.mark.asyncio
async def test_follow_twice_is_conflict_and_unfollow_is_idempotent(session):
    ada = await make_person(session, "ada")
    bob = await make_person(session, "bob")
    ctx = await context_for(session, ada.person.id)
    graph = FollowGraph(session)
    target = bob.personal_owner.id

    await graph.follow(ctx, target)
    assert await graph.is_following(ctx.active_owner_id, target) is True
    with pytest.raises(Conflict, match="Already following"):
        await graph.follow(ctx, target)

    await graph.unfollow(ctx, target)
    await graph.unfollow(ctx, target)
    assert await graph.is_following(ctx.active_owner_id, target) is False


@pytest.mark.asyncio
async def test_follow_unknown_owner_is_not_found(session):
    ada = await make_person(session, "ada")
    ctx = await context_for(session, ada.person.id)

    with pytest.raises(NotFound):
        await FollowGraph(session).follow(ctx, uuid.uuid4())


@pytest.mark.asyncio
async def test_person_follows_organization_owner(session):
    """Z's personal owner follows Acme's organization owner."""
    ada = await make_person(session, "ada")
    zed = await make_person(session, "zed")
    created = await OrganizationService(session).create_organization(
        ada.person.id, name="Acme", slug="acme"
    )
    o2, o3 = created.owner_id, zed.personal_owner.id
    ctx = await context_for(session, zed.person.id)
    graph = FollowGraph(session)

    await graph.follow(ctx, o2)

    assert await graph.is_following(o3, o2) is True
    followers = await graph.list_followers(o2)
    assert [e.owner_id for e in followers] == [o3]
    assert followers[0].kind is OwnerKind.PERSON
    assert isinstance(followers[0].identity, PersonIdentity)
    assert followers[0].anomaly is False

    following = await graph.list_following(o3)
    assert [e.owner_id for e in following] == [o2]
    assert isinstance(following[0].identity, OrganizationIdentity)

    counts = await graph.follow_counts(o2)
    assert (counts.followers, counts.following) == (1, 0)


@pytest.mark.asyncio
async def test_organization_acts_as_follower(session):
    ada = await make_person(session, "ada")
    bob = await make_person(session, "bob")
    created = await OrganizationService(session).create_organization(
        ada.person.id, name="Acme", slug="acme"
    )
    ctx = await context_for(session, ada.person.id, created.owner_id)

    await FollowGraph(session).follow(ctx, bob.personal_owner.id)

    followers = await FollowGraph(session).list_followers(bob.personal_owner.id)
    assert [e.owner_id for e in followers] == [created.owner_id]
    assert followers[0].kind is OwnerKind.ORGANIZATION


@pytest.mark.asyncio
async def test_unresolvable_edge_is_flagged_not_dropped(session_factory, database_url):
    async with session_factory() as session:
        ada = await make_person(session, "ada")
        zed = await make_person(session, "zed")
        created = await OrganizationService(session).create_organization(
            ada.person.id, name="Acme", slug="acme"
        )
        org_owner_id, zed_owner_id = created.owner_id, zed.personal_owner.id
        org_id = created.organization.id
        ctx = await context_for(session, zed.person.id)
        await FollowGraph(session).follow(ctx, org_owner_id)

    # a plain sqlite connection does not enforce foreign keys, so the
    # organization row can vanish from under its owner
    engine = create_engine(database_url.replace("+aiosqlite", ""))
    with engine.begin() as conn:
        conn.execute(delete(OrganizationModel).where(OrganizationModel.id == org_id))
    engine.dispose()

    async with session_factory() as session:
        following = await FollowGraph(session).list_following(zed_owner_id)
        assert len(following) == 1
        assert following[0].owner_id == org_owner_id
        assert following[0].identity is None
        assert following[0].anomaly is True
