"""Repositories for owned content: projects, events and posts."""

from __future__ import annotations

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from project_library_service.db.models import EventModel, OwnerModel, PostModel, ProjectModel

ModelT = TypeVar("ModelT", ProjectModel, EventModel, PostModel)


class _OwnedContentRepo(Generic[ModelT]):
    model: type[ModelT]

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, owner: OwnerModel, **fields: Any) -> ModelT:
        item = self.model(owner=owner, **fields)
        self._session.add(item)
        await self._session.flush()
        return item

    async def get(self, item_id: UUID) -> ModelT | None:
        return await self._session.get(self.model, item_id)

    async def get_for_update(self, item_id: UUID) -> ModelT | None:
        result = await self._session.execute(
            select(self.model).where(self.model.id == item_id).with_for_update(of=self.model)
        )
        return result.scalars().first()

    async def update(self, item: ModelT, **fields: Any) -> ModelT:
        for key, value in fields.items():
            if hasattr(item, key):
                setattr(item, key, value)
        await self._session.flush()
        return item

    async def delete(self, item: ModelT) -> None:
        await self._session.delete(item)
        await self._session.flush()

    async def list(
        self, owner_id: UUID | None = None, limit: int = 50, offset: int = 0
    ) -> tuple[list[ModelT], int]:
        query = select(self.model)
        count_query = select(func.count()).select_from(self.model)
        if owner_id is not None:
            query = query.where(self.model.owner_id == owner_id)
            count_query = count_query.where(self.model.owner_id == owner_id)
        query = query.order_by(self.model.created_at.desc()).offset(offset).limit(limit)
        result = await self._session.execute(query)
        total_result = await self._session.execute(count_query)
        return list(result.scalars().all()), total_result.scalar_one()


class ProjectsRepo(_OwnedContentRepo[ProjectModel]):
    model = ProjectModel


class EventsRepo(_OwnedContentRepo[EventModel]):
    model = EventModel


class PostsRepo(_OwnedContentRepo[PostModel]):
    model = PostModel

    async def list_filtered(
        self,
        owner_id: UUID | None = None,
        project_id: UUID | None = None,
        event_id: UUID | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[PostModel]:
        query = select(PostModel)
        if owner_id is not None:
            query = query.where(PostModel.owner_id == owner_id)
        if project_id is not None:
            query = query.where(PostModel.project_id == project_id)
        if event_id is not None:
            query = query.where(PostModel.event_id == event_id)
        query = query.order_by(PostModel.created_at.desc()).offset(offset).limit(limit)
        result = await self._session.execute(query)
        return list(result.scalars().all())

    async def delete_for_parent(
        self, project_id: UUID | None = None, event_id: UUID | None = None
    ) -> int:
        stmt = delete(PostModel)
        if project_id is not None:
            stmt = stmt.where(PostModel.project_id == project_id)
        elif event_id is not None:
            stmt = stmt.where(PostModel.event_id == event_id)
        else:
            return 0
        result = await self._session.execute(stmt)
        return result.rowcount or 0
