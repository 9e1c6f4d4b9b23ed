"""Auth endpoints: register, login, refresh, /me."""

from __future__ import annotations

from uuid import UUID

import jwt
import structlog
from fastapi import APIRouter

from project_library_service.auth.deps import PrincipalDep, SessionContextDep
from project_library_service.auth.jwt import (
    REFRESH,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from project_library_service.db.deps import SessionDep
from project_library_service.errors import Unauthorized
from project_library_service.rest.routes.people import person_to_schema
from project_library_service.rest.schemas import (
    LoginRequest,
    MeResponse,
    PersonProfileSchema,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UpdateProfileRequest,
    identity_to_schema,
)
from project_library_service.services.deps import IdentityServiceDep
from project_library_service.services.session_context import SessionContextResolver

router = APIRouter(prefix="/auth")

log = structlog.get_logger(__name__)


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(request: RegisterRequest, identity: IdentityServiceDep) -> TokenResponse:
    """Create a person and their personal owner, returning JWT tokens."""
    registration = await identity.register(
        email=request.email,
        password=request.password,
        handle=request.handle,
        display_name=request.display_name,
    )
    person = registration.person
    return TokenResponse(
        access_token=create_access_token(person.id, person.email),
        refresh_token=create_refresh_token(person.id),
        active_owner_id=str(registration.personal_owner.id),
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest, identity: IdentityServiceDep, session: SessionDep
) -> TokenResponse:
    """Verify credentials and return JWT tokens acting as the personal owner."""
    person = await identity.authenticate(request.email, request.password)
    ctx = await SessionContextResolver(session).resolve(person.id)
    log.info("person_logged_in", person_id=str(person.id))
    return TokenResponse(
        access_token=create_access_token(person.id, person.email),
        refresh_token=create_refresh_token(person.id),
        active_owner_id=str(ctx.active_owner_id),
    )


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    request: RefreshRequest, identity: IdentityServiceDep, session: SessionDep
) -> TokenResponse:
    """Exchange a refresh token for new tokens, keeping a still-valid active owner."""
    try:
        payload = decode_token(request.refresh_token, expected_type=REFRESH)
        person_id = UUID(payload["sub"])
        act = payload.get("act")
        requested_owner_id = UUID(act) if act else None
    except (jwt.PyJWTError, KeyError, ValueError) as exc:
        raise Unauthorized("Invalid or expired refresh token") from exc

    person = await identity.get_person(person_id)
    ctx = await SessionContextResolver(session).resolve(person.id, requested_owner_id)
    active_owner_id = ctx.active_owner_id if ctx.claim_honored else None
    return TokenResponse(
        access_token=create_access_token(person.id, person.email, active_owner_id=active_owner_id),
        refresh_token=create_refresh_token(person.id, active_owner_id=active_owner_id),
        active_owner_id=str(ctx.active_owner_id),
    )


@router.get("/me", response_model=MeResponse)
async def me(ctx: SessionContextDep, identity: IdentityServiceDep) -> MeResponse:
    """Return the authenticated person and the owner they are acting as."""
    person = await identity.get_person(ctx.person_id)
    return MeResponse(
        person_id=str(person.id),
        email=person.email,
        handle=person.handle,
        display_name=person.display_name,
        active_owner_id=str(ctx.active_owner_id),
        active_owner=identity_to_schema(ctx.identity),
    )


@router.patch("/me", response_model=PersonProfileSchema)
async def update_me(
    request: UpdateProfileRequest, principal: PrincipalDep, identity: IdentityServiceDep
) -> PersonProfileSchema:
    """Edit the authenticated person's profile; omitted fields are left unchanged."""
    person = await identity.update_profile(
        principal.person_id, **request.model_dump(exclude_unset=True)
    )
    return person_to_schema(person, await identity.get_personal_owner(person.id))
