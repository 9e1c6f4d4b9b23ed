"""Public person profiles."""

from __future__ import annotations

from fastapi import APIRouter

from project_library_service.db.models import OwnerModel, PersonModel
from project_library_service.rest.schemas import PersonProfileSchema
from project_library_service.services.deps import IdentityServiceDep

router = APIRouter(prefix="/people")


def person_to_schema(person: PersonModel, owner: OwnerModel | None) -> PersonProfileSchema:
    """Convert an ORM PersonModel to its public profile; the email is never exposed."""
    return PersonProfileSchema(
        id=str(person.id),
        handle=person.handle,
        display_name=person.display_name,
        headline=person.headline,
        bio=person.bio,
        location=person.location,
        owner_id=str(owner.id) if owner is not None else None,
        created_at=person.created_at,
    )


@router.get("/by-handle/{handle}", response_model=PersonProfileSchema)
async def get_person_by_handle(handle: str, identity: IdentityServiceDep) -> PersonProfileSchema:
    """Look a person up by handle, e.g. to add them to an organization."""
    person = await identity.get_person_by_handle(handle)
    return person_to_schema(person, await identity.get_personal_owner(person.id))
