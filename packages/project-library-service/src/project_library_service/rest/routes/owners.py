"""Owner profile and follow graph endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter

from project_library_service.auth.deps import SessionContextDep
from project_library_service.domain.enums import OwnerKind
from project_library_service.domain.identity import describe_owner
from project_library_service.rest.schemas import (
    FollowEdgeSchema,
    FollowListResponse,
    FollowStatusResponse,
    OwnerSchema,
    identity_to_schema,
)
from project_library_service.services.deps import FollowGraphDep, IdentityServiceDep
from project_library_service.services.follows import FollowEdge

router = APIRouter(prefix="/owners")


def _edge_to_schema(edge: FollowEdge) -> FollowEdgeSchema:
    return FollowEdgeSchema(
        owner_id=str(edge.owner_id),
        kind=edge.kind,
        followed_at=edge.followed_at,
        identity=identity_to_schema(edge.identity),
        anomaly=edge.anomaly,
    )


@router.get("/{owner_id}", response_model=OwnerSchema)
async def get_owner(
    owner_id: UUID, identity: IdentityServiceDep, graph: FollowGraphDep
) -> OwnerSchema:
    owner = await identity.get_owner(owner_id)
    counts = await graph.follow_counts(owner.id)
    return OwnerSchema(
        owner_id=str(owner.id),
        kind=OwnerKind(owner.kind),
        status=owner.status,
        identity=identity_to_schema(describe_owner(owner)),
        followers=counts.followers,
        following=counts.following,
    )


@router.get("/{owner_id}/followers", response_model=FollowListResponse)
async def list_followers(owner_id: UUID, graph: FollowGraphDep) -> FollowListResponse:
    edges = await graph.list_followers(owner_id)
    return FollowListResponse(owners=[_edge_to_schema(e) for e in edges], total=len(edges))


@router.get("/{owner_id}/following", response_model=FollowListResponse)
async def list_following(owner_id: UUID, graph: FollowGraphDep) -> FollowListResponse:
    edges = await graph.list_following(owner_id)
    return FollowListResponse(owners=[_edge_to_schema(e) for e in edges], total=len(edges))


@router.get("/{owner_id}/follow", response_model=FollowStatusResponse)
async def follow_status(
    owner_id: UUID, ctx: SessionContextDep, graph: FollowGraphDep
) -> FollowStatusResponse:
    """Whether the caller's active owner follows this owner."""
    return FollowStatusResponse(following=await graph.is_following(ctx.active_owner_id, owner_id))


@router.post("/{owner_id}/follow", response_model=FollowStatusResponse, status_code=201)
async def follow(
    owner_id: UUID, ctx: SessionContextDep, graph: FollowGraphDep
) -> FollowStatusResponse:
    await graph.follow(ctx, owner_id)
    return FollowStatusResponse(following=True)


@router.delete("/{owner_id}/follow", response_model=FollowStatusResponse)
async def unfollow(
    owner_id: UUID, ctx: SessionContextDep, graph: FollowGraphDep
) -> FollowStatusResponse:
    await graph.unfollow(ctx, owner_id)
    return FollowStatusResponse(following=False)
