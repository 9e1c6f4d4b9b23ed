"""Registration, login and the one-personal-owner rule."""

from __future__ import annotations

import pytest
from _helpers import PASSWORD, make_person
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from project_library_service.db.models import OwnerModel
from project_library_service.db.repositories.identity import OwnersRepo
from project_library_service.domain.enums import OwnerKind, OwnerStatus
from project_library_service.domain.identity import PersonIdentity, describe_owner
from project_library_service.errors import BadRequest, Conflict, NotFound, Unauthorized
from project_library_service.services.identity import IdentityService


@pytest.mark.asyncio
async def test_register_creates_person_and_personal_owner(session):
    registration = await make_person(session, "ada")

    owner = registration.personal_owner
    assert owner.person_id == registration.person.id
    assert owner.organization_id is None
    assert owner.kind == OwnerKind.PERSON.value
    assert owner.status == OwnerStatus.ACTIVE.value

    identity = describe_owner(owner)
    assert isinstance(identity, PersonIdentity)
    assert identity.handle == "ada"


@pytest.mark.asyncio
async def test_register_normalizes_email(session):
    service = IdentityService(session)
    registration = await service.register("  Ada@Example.COM ", PASSWORD, "ada")
    assert registration.person.email == "ada@example.com"


@pytest.mark.asyncio
async def test_duplicate_email_is_conflict(session):
    await make_person(session, "ada")
    with pytest.raises(Conflict, match="Email"):
        await IdentityService(session).register("ADA@example.com", PASSWORD, "ada2")


@pytest.mark.asyncio
async def test_duplicate_handle_is_conflict(session):
    await make_person(session, "ada")
    with pytest.raises(Conflict, match="Handle"):
        await IdentityService(session).register("other@example.com", PASSWORD, "ADA")


@pytest.mark.asyncio
@pytest.mark.parametrize("handle", ["ab", "has space", "x" * 21, "semi;colon"])
async def test_invalid_handle_is_rejected(session, handle):
    with pytest.raises(BadRequest):
        await IdentityService(session).register("h@example.com", PASSWORD, handle)


@pytest.mark.asyncio
async def test_short_password_is_rejected(session):
    with pytest.raises(BadRequest):
        await IdentityService(session).register("p@example.com", "short", "shorty")


@pytest.mark.asyncio
async def test_authenticate(session):
    await make_person(session, "ada")
    service = IdentityService(session)

    person = await service.authenticate("ADA@example.com", PASSWORD)
    assert person.handle == "ada"

    with pytest.raises(Unauthorized):
        await service.authenticate("ada@example.com", "wrong-password")
    with pytest.raises(Unauthorized):
        await service.authenticate("nobody@example.com", PASSWORD)


@pytest.mark.asyncio
async def test_get_or_create_personal_owner_reuses_existing(session):
    registration = await make_person(session, "ada")
    owners = OwnersRepo(session)

    again = await owners.get_or_create_personal(registration.person)
    assert again.id == registration.personal_owner.id


@pytest.mark.asyncio
async def test_database_refuses_second_personal_owner(session_factory):
    async with session_factory() as session:
        registration = await make_person(session, "ada")
        person_id = registration.person.id

    async with session_factory() as session:
        session.add(OwnerModel(person_id=person_id, kind=OwnerKind.PERSON.value))
        with pytest.raises(IntegrityError):
            await session.flush()
        await session.rollback()

    async with session_factory() as session:
        count = await session.execute(
            select(func.count())
            .select_from(OwnerModel)
            .where(OwnerModel.person_id == person_id, OwnerModel.organization_id.is_(None))
        )
        assert count.scalar_one() == 1


@pytest.mark.asyncio
async def test_owner_kind_must_match_scope(session_factory):
    async with session_factory() as session:
        registration = await make_person(session, "ada")
        person_id = registration.person.id

    async with session_factory() as session:
        # an ORGANIZATION-kind owner without an organization
        session.add(OwnerModel(person_id=person_id, kind=OwnerKind.ORGANIZATION.value))
        with pytest.raises(IntegrityError):
            await session.flush()
        await session.rollback()


@pytest.mark.asyncio
async def test_person_lookup_by_handle_ignores_case(session):
    ada = await make_person(session, "Ada_L")
    identity = IdentityService(session)

    assert (await identity.get_person_by_handle("ada_l")).id == ada.person.id
    assert (await identity.get_person_by_handle(" ADA_L ")).id == ada.person.id
    with pytest.raises(NotFound):
        await identity.get_person_by_handle("nobody")


@pytest.mark.asyncio
async def test_update_profile(session):
    ada = await make_person(session, "ada")
    identity = IdentityService(session)

    person = await identity.update_profile(
        ada.person.id, headline="  Engineer ", bio="Builds engines", location="London", email="x@y.z"
    )
    assert (person.headline, person.bio, person.location) == ("Engineer", "Builds engines", "London")
    assert person.email == "ada@example.com"

    person = await identity.update_profile(ada.person.id, bio="   ")
    assert person.bio is None
    assert person.headline == "Engineer"


@pytest.mark.asyncio
async def test_update_profile_enforces_lengths(session):
    ada = await make_person(session, "ada")

    with pytest.raises(BadRequest, match="Bio"):
        await IdentityService(session).update_profile(ada.person.id, bio="x" * 2001)
