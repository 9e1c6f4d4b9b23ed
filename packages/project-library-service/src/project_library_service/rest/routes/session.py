"""Active-owner endpoints: inspect, validate a switch, commit a switch."""

from __future__ import annotations

from fastapi import APIRouter

from project_library_service.auth.deps import PrincipalDep, SessionContextDep
from project_library_service.domain.enums import SwitchState
from project_library_service.rest.schemas import (
    ActiveOwnerResponse,
    CommitSwitchRequest,
    MyOrganizationSchema,
    MyOrganizationsResponse,
    PendingSwitchResponse,
    SwitchRequest,
    TokenResponse,
    identity_to_schema,
)
from project_library_service.rest.routes.organizations import org_to_schema
from project_library_service.services.deps import ActorSwitcherDep, MembershipAuthorityDep

router = APIRouter()


@router.get("/session/active-owner", response_model=ActiveOwnerResponse)
async def get_active_owner(ctx: SessionContextDep) -> ActiveOwnerResponse:
    return ActiveOwnerResponse(
        kind=ctx.kind,
        owner_id=str(ctx.active_owner_id),
        data=identity_to_schema(ctx.identity),
        state=SwitchState.ACTIVE if ctx.claim_honored else SwitchState.IDLE,
    )


@router.put("/session/active-owner", response_model=PendingSwitchResponse)
async def switch_active_owner(
    request: SwitchRequest, principal: PrincipalDep, switcher: ActorSwitcherDep
) -> PendingSwitchResponse:
    """
    Validate a switch to another owner.

    The caller's tokens are unchanged; the returned ``switch_token`` is
    committed through ``POST /session/refresh``.
    """
    pending = await switcher.validate_switch(principal.person_id, request.owner_id)
    return PendingSwitchResponse(
        owner_id=str(pending.owner_id),
        kind=pending.kind,
        state=pending.state,
        switch_token=pending.switch_token,
    )


@router.post("/session/refresh", response_model=TokenResponse)
async def commit_active_owner(
    request: CommitSwitchRequest, principal: PrincipalDep, switcher: ActorSwitcherDep
) -> TokenResponse:
    active = await switcher.commit_active_owner(principal.person_id, request.switch_token)
    return TokenResponse(
        access_token=active.access_token,
        refresh_token=active.refresh_token,
        active_owner_id=str(active.context.active_owner_id),
    )


@router.get("/me/organizations", response_model=MyOrganizationsResponse)
async def my_organizations(
    principal: PrincipalDep, memberships: MembershipAuthorityDep
) -> MyOrganizationsResponse:
    rows = await memberships.organizations_for(principal.person_id)
    return MyOrganizationsResponse(
        organizations=[
            MyOrganizationSchema(
                organization=org_to_schema(row.organization),
                owner_id=str(row.owner_id),
                role=row.role,
            )
            for row in rows
        ]
    )
