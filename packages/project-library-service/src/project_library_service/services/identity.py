"""Person registration, login and owner lookups."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from project_library_service.auth.credentials import (
    MAX_PASSWORD_BYTES,
    hash_password,
    normalize_email,
    verify_password,
)
from project_library_service.db.engine import unit_of_work
from project_library_service.db.models import OwnerModel, PersonModel
from project_library_service.db.repositories.identity import OwnersRepo, PeopleRepo
from project_library_service.errors import BadRequest, Conflict, NotFound, Unauthorized

log = structlog.get_logger(__name__)

HANDLE_PATTERN = re.compile(r"^[A-Za-z0-9_-]{3,20}$")
MIN_PASSWORD_LENGTH = 8

# editable profile fields and their maximum lengths
PROFILE_LIMITS = {"display_name": 100, "headline": 200, "bio": 2000, "location": 100}


@dataclass(frozen=True)
class Registration:
    person: PersonModel
    personal_owner: OwnerModel


class IdentityService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._people = PeopleRepo(session)
        self._owners = OwnersRepo(session)

    async def register(
        self,
        email: str,
        password: str,
        handle: str,
        display_name: str | None = None,
    ) -> Registration:
        """Create a person together with their personal owner."""
        email = normalize_email(email)
        handle = handle.strip()
        if "@" not in email:
            raise BadRequest("A valid email address is required")
        if not HANDLE_PATTERN.match(handle):
            raise BadRequest(
                "Handle must be 3-20 characters of letters, digits, underscores or hyphens"
            )
        if len(password) < MIN_PASSWORD_LENGTH:
            raise BadRequest(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise BadRequest(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        existing = await self._people.find_by_email_or_handle(email, handle)
        if existing is not None:
            if existing.email == email:
                raise Conflict("Email already registered")
            raise Conflict("Handle already taken")

        try:
            async with unit_of_work(self._session):
                person = await self._people.create(
                    email=email,
                    handle=handle,
                    password_hash=hash_password(password),
                    display_name=display_name,
                )
                owner = await self._owners.create_personal(person)
        except IntegrityError as exc:
            raise Conflict("Email or handle already registered") from exc

        log.info("person_registered", person_id=str(person.id), owner_id=str(owner.id))
        return Registration(person=person, personal_owner=owner)

    async def authenticate(self, email: str, password: str) -> PersonModel:
        person = await self._people.get_by_email(normalize_email(email))
        if person is None or not verify_password(password, person.password_hash):
            log.info("login_failed")
            raise Unauthorized("Invalid email or password")
        return person

    async def get_person(self, person_id: UUID) -> PersonModel:
        person = await self._people.get(person_id)
        if person is None:
            raise Unauthorized("Account no longer exists")
        return person

    async def get_person_by_handle(self, handle: str) -> PersonModel:
        person = await self._people.get_by_handle(handle.strip())
        if person is None:
            raise NotFound("Person not found")
        return person

    async def update_profile(self, person_id: UUID, **changes: Any) -> PersonModel:
        """Edit the caller's public profile; blank strings clear a field."""
        person = await self.get_person(person_id)
        fields: dict[str, str | None] = {}
        for key, value in changes.items():
            if key not in PROFILE_LIMITS:
                continue
            if value is not None:
                value = value.strip() or None
            if value is not None and len(value) > PROFILE_LIMITS[key]:
                raise BadRequest(
                    f"{key.replace('_', ' ').capitalize()} must be "
                    f"{PROFILE_LIMITS[key]} characters or less"
                )
            fields[key] = value

        async with unit_of_work(self._session):
            await self._people.update(person, **fields)

        log.info("person_profile_updated", person_id=str(person_id), fields=sorted(fields))
        return person

    async def get_owner(self, owner_id: UUID) -> OwnerModel:
        owner = await self._owners.get(owner_id)
        if owner is None:
            raise NotFound("Owner not found")
        return owner

    async def owners_for_person(self, person_id: UUID) -> list[OwnerModel]:
        return await self._owners.list_for_person(person_id)

    async def get_personal_owner(self, person_id: UUID) -> OwnerModel | None:
        return await self._owners.get_personal(person_id)
