"""Repository for owner-to-owner follow edges."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from project_library_service.db.models import FollowModel


class FollowsRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, follower_owner_id: UUID, following_owner_id: UUID) -> FollowModel | None:
        result = await self._session.execute(
            select(FollowModel).where(
                FollowModel.follower_owner_id == follower_owner_id,
                FollowModel.following_owner_id == following_owner_id,
            )
        )
        return result.scalars().first()

    async def create(self, follower_owner_id: UUID, following_owner_id: UUID) -> FollowModel:
        follow = FollowModel(
            follower_owner_id=follower_owner_id,
            following_owner_id=following_owner_id,
        )
        self._session.add(follow)
        await self._session.flush()
        return follow

    async def delete(self, follow: FollowModel) -> None:
        await self._session.delete(follow)
        await self._session.flush()

    async def list_followers(self, owner_id: UUID) -> list[FollowModel]:
        result = await self._session.execute(
            select(FollowModel)
            .where(FollowModel.following_owner_id == owner_id)
            .order_by(FollowModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_following(self, owner_id: UUID) -> list[FollowModel]:
        result = await self._session.execute(
            select(FollowModel)
            .where(FollowModel.follower_owner_id == owner_id)
            .order_by(FollowModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def counts(self, owner_id: UUID) -> tuple[int, int]:
        """Return (followers, following) totals for an owner."""
        followers = await self._session.execute(
            select(func.count())
            .select_from(FollowModel)
            .where(FollowModel.following_owner_id == owner_id)
        )
        following = await self._session.execute(
            select(func.count())
            .select_from(FollowModel)
            .where(FollowModel.follower_owner_id == owner_id)
        )
        return followers.scalar_one(), following.scalar_one()
