"""Owner identities and the per-request session context.

An Owner is shown to the outside world either as the person behind it or as
the organization it acts for. ``describe_owner`` is the single place that
decides which, by looking at ``owner.kind``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from uuid import UUID

from project_library_service.db.models import OrganizationModel, OwnerModel, PersonModel
from project_library_service.domain.enums import OwnerKind


@dataclass(frozen=True)
class PersonIdentity:
    id: UUID
    handle: str
    display_name: str | None
    kind: Literal["PERSON"] = "PERSON"


@dataclass(frozen=True)
class OrganizationIdentity:
    id: UUID
    slug: str
    name: str
    kind: Literal["ORGANIZATION"] = "ORGANIZATION"


OwnerIdentity = PersonIdentity | OrganizationIdentity


def person_identity(person: PersonModel) -> PersonIdentity:
    return PersonIdentity(id=person.id, handle=person.handle, display_name=person.display_name)


def organization_identity(org: OrganizationModel) -> OrganizationIdentity:
    return OrganizationIdentity(id=org.id, slug=org.slug, name=org.name)


def describe_owner(owner: OwnerModel) -> OwnerIdentity | None:
    """Return the public identity of an owner, or None if its target is missing."""
    kind = OwnerKind(owner.kind)
    if kind is OwnerKind.ORGANIZATION:
        if owner.organization is None:
            return None
        return organization_identity(owner.organization)
    if owner.person is None:
        return None
    return person_identity(owner.person)


@dataclass(frozen=True)
class SessionContext:
    """Who is calling and which owner their actions are attributed to."""

    person_id: UUID
    active_owner_id: UUID
    active_owner: OwnerModel
    identity: OwnerIdentity
    # True when the token's active-owner claim was honored as-is
    claim_honored: bool = False

    @property
    def kind(self) -> OwnerKind:
        return OwnerKind(self.active_owner.kind)

    @property
    def organization_id(self) -> UUID | None:
        return self.active_owner.organization_id
