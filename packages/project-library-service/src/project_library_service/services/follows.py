"""Follow graph between owners.

Follow edges connect owners, not people: following an organization means
following its organization-scoped identity, and an organization can follow
someone through whichever of its owners is active.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from project_library_service.db.engine import unit_of_work
from project_library_service.db.models import FollowModel, OwnerModel
from project_library_service.db.repositories.follows import FollowsRepo
from project_library_service.db.repositories.identity import OwnersRepo
from project_library_service.domain.enums import OwnerKind
from project_library_service.domain.identity import OwnerIdentity, SessionContext, describe_owner
from project_library_service.errors import BadRequest, Conflict, NotFound

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FollowEdge:
    """One side of a follow edge as seen from the listed owner."""

    owner_id: UUID
    kind: OwnerKind
    followed_at: datetime | None
    identity: OwnerIdentity | None
    # the opposite owner resolves to neither a person nor an organization
    anomaly: bool = False


@dataclass(frozen=True)
class FollowCounts:
    followers: int
    following: int


class FollowGraph:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._owners = OwnersRepo(session)
        self._follows = FollowsRepo(session)

    async def follow(self, ctx: SessionContext, target_owner_id: UUID) -> FollowModel:
        if target_owner_id == ctx.active_owner_id:
            raise BadRequest("You cannot follow yourself")
        target = await self._owners.get(target_owner_id)
        if target is None or describe_owner(target) is None:
            raise NotFound("Owner not found")
        if await self._follows.get(ctx.active_owner_id, target_owner_id) is not None:
            raise Conflict("Already following")

        try:
            async with unit_of_work(self._session):
                follow = await self._follows.create(ctx.active_owner_id, target_owner_id)
        except IntegrityError as exc:
            raise Conflict("Already following") from exc

        log.info(
            "owner_followed",
            follower_owner_id=str(ctx.active_owner_id),
            following_owner_id=str(target_owner_id),
        )
        return follow

    async def unfollow(self, ctx: SessionContext, target_owner_id: UUID) -> None:
        """Remove the edge if present; missing edges are not an error."""
        async with unit_of_work(self._session):
            follow = await self._follows.get(ctx.active_owner_id, target_owner_id)
            if follow is None:
                return
            await self._follows.delete(follow)

        log.info(
            "owner_unfollowed",
            follower_owner_id=str(ctx.active_owner_id),
            following_owner_id=str(target_owner_id),
        )

    async def is_following(self, owner_id: UUID, target_owner_id: UUID) -> bool:
        return await self._follows.get(owner_id, target_owner_id) is not None

    async def list_followers(self, owner_id: UUID) -> list[FollowEdge]:
        await self._require_owner(owner_id)
        follows = await self._follows.list_followers(owner_id)
        return [self._edge(f, f.follower, owner_id) for f in follows]

    async def list_following(self, owner_id: UUID) -> list[FollowEdge]:
        await self._require_owner(owner_id)
        follows = await self._follows.list_following(owner_id)
        return [self._edge(f, f.following, owner_id) for f in follows]

    async def follow_counts(self, owner_id: UUID) -> FollowCounts:
        followers, following = await self._follows.counts(owner_id)
        return FollowCounts(followers=followers, following=following)

    async def _require_owner(self, owner_id: UUID) -> OwnerModel:
        owner = await self._owners.get(owner_id)
        if owner is None:
            raise NotFound("Owner not found")
        return owner

    @staticmethod
    def _edge(follow: FollowModel, other: OwnerModel, listed_owner_id: UUID) -> FollowEdge:
        identity = describe_owner(other)
        if identity is None:
            log.warning(
                "follow_edge_unresolved",
                follow_id=str(follow.id),
                owner_id=str(listed_owner_id),
                other_owner_id=str(other.id),
            )
        return FollowEdge(
            owner_id=other.id,
            kind=OwnerKind(other.kind),
            followed_at=follow.created_at,
            identity=identity,
            anomaly=identity is None,
        )
