"""Projects, events and posts attributed to the active owner."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from project_library_service.db.engine import unit_of_work
from project_library_service.db.models import EventModel, PostModel, ProjectModel
from project_library_service.db.repositories.content import EventsRepo, PostsRepo, ProjectsRepo
from project_library_service.domain.identity import SessionContext
from project_library_service.errors import BadRequest, NotFound
from project_library_service.media import MediaStore, get_media_store
from project_library_service.services.attribution import authorize_mutation, authorize_parent

log = structlog.get_logger(__name__)

MAX_PAGE_SIZE = 100

PROJECT_FIELDS = ("title", "description", "tags")
EVENT_FIELDS = ("title", "description", "location", "starts_at", "ends_at", "tags")
POST_FIELDS = ("title", "content", "tags")

# NOT NULL columns; a null in an update leaves the stored value alone
REQUIRED_FIELDS = ("title", "description", "content", "tags")


def _page(limit: int, offset: int) -> tuple[int, int]:
    return max(1, min(limit, MAX_PAGE_SIZE)), max(0, offset)


def _pick(changes: dict[str, Any], allowed: tuple[str, ...]) -> dict[str, Any]:
    return {
        k: v
        for k, v in changes.items()
        if k in allowed and not (v is None and k in REQUIRED_FIELDS)
    }


class ContentService:
    def __init__(self, session: AsyncSession, media: MediaStore | None = None) -> None:
        self._session = session
        self._media = media if media is not None else get_media_store()
        self.projects = ProjectsRepo(session)
        self.events = EventsRepo(session)
        self.posts = PostsRepo(session)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def create_project(self, ctx: SessionContext, **fields: Any) -> ProjectModel:
        async with unit_of_work(self._session):
            project = await self.projects.create(ctx.active_owner, **_pick(fields, PROJECT_FIELDS))
        log.info("project_created", project_id=str(project.id), owner_id=str(ctx.active_owner_id))
        return project

    async def get_project(self, project_id: UUID) -> ProjectModel:
        project = await self.projects.get(project_id)
        if project is None:
            raise NotFound("Project not found")
        return project

    async def list_projects(
        self, owner_id: UUID | None = None, limit: int = 50, offset: int = 0
    ) -> tuple[list[ProjectModel], int]:
        limit, offset = _page(limit, offset)
        return await self.projects.list(owner_id=owner_id, limit=limit, offset=offset)

    async def update_project(
        self, ctx: SessionContext, project_id: UUID, **changes: Any
    ) -> ProjectModel:
        async with unit_of_work(self._session):
            project = await self.projects.get_for_update(project_id)
            if project is None:
                raise NotFound("Project not found")
            authorize_mutation(ctx, project.owner_id)
            await self.projects.update(project, **_pick(changes, PROJECT_FIELDS))
        return project

    async def delete_project(self, ctx: SessionContext, project_id: UUID) -> None:
        async with unit_of_work(self._session):
            project = await self.projects.get_for_update(project_id)
            if project is None:
                raise NotFound("Project not found")
            authorize_mutation(ctx, project.owner_id)
            owner_id = project.owner_id
            posts_deleted = await self.posts.delete_for_parent(project_id=project_id)
            await self.projects.delete(project)

        log.info(
            "project_deleted",
            project_id=str(project_id),
            owner_id=str(owner_id),
            posts_deleted=posts_deleted,
        )
        await self._release_media(owner_id, "projects", project_id)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def create_event(self, ctx: SessionContext, **fields: Any) -> EventModel:
        fields = _pick(fields, EVENT_FIELDS)
        self._check_schedule(fields.get("starts_at"), fields.get("ends_at"))
        async with unit_of_work(self._session):
            event = await self.events.create(ctx.active_owner, **fields)
        log.info("event_created", event_id=str(event.id), owner_id=str(ctx.active_owner_id))
        return event

    async def get_event(self, event_id: UUID) -> EventModel:
        event = await self.events.get(event_id)
        if event is None:
            raise NotFound("Event not found")
        return event

    async def list_events(
        self, owner_id: UUID | None = None, limit: int = 50, offset: int = 0
    ) -> tuple[list[EventModel], int]:
        limit, offset = _page(limit, offset)
        return await self.events.list(owner_id=owner_id, limit=limit, offset=offset)

    async def update_event(self, ctx: SessionContext, event_id: UUID, **changes: Any) -> EventModel:
        changes = _pick(changes, EVENT_FIELDS)
        async with unit_of_work(self._session):
            event = await self.events.get_for_update(event_id)
            if event is None:
                raise NotFound("Event not found")
            authorize_mutation(ctx, event.owner_id)
            self._check_schedule(
                changes.get("starts_at", event.starts_at), changes.get("ends_at", event.ends_at)
            )
            await self.events.update(event, **changes)
        return event

    async def delete_event(self, ctx: SessionContext, event_id: UUID) -> None:
        async with unit_of_work(self._session):
            event = await self.events.get_for_update(event_id)
            if event is None:
                raise NotFound("Event not found")
            authorize_mutation(ctx, event.owner_id)
            owner_id = event.owner_id
            posts_deleted = await self.posts.delete_for_parent(event_id=event_id)
            await self.events.delete(event)

        log.info(
            "event_deleted",
            event_id=str(event_id),
            owner_id=str(owner_id),
            posts_deleted=posts_deleted,
        )
        await self._release_media(owner_id, "events", event_id)

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    async def create_post(
        self,
        ctx: SessionContext,
        content: str,
        title: str | None = None,
        project_id: UUID | None = None,
        event_id: UUID | None = None,
        tags: list[str] | None = None,
    ) -> PostModel:
        """
        Create a post, optionally under a project or event.

        The parent is re-read and locked inside the transaction and must be
        owned by the active owner; the post is always attributed to the
        active owner.
        """
        if project_id is not None and event_id is not None:
            raise BadRequest("A post can belong to a project or an event, not both")
        if not content or not content.strip():
            raise BadRequest("Post content is required")

        async with unit_of_work(self._session):
            if project_id is not None:
                project = await self.projects.get_for_update(project_id)
                if project is None:
                    raise NotFound("Project not found")
                authorize_parent(ctx, project.owner_id)
            elif event_id is not None:
                event = await self.events.get_for_update(event_id)
                if event is None:
                    raise NotFound("Event not found")
                authorize_parent(ctx, event.owner_id)

            post = await self.posts.create(
                ctx.active_owner,
                title=title,
                content=content,
                project_id=project_id,
                event_id=event_id,
                tags=tags or [],
            )

        log.info(
            "post_created",
            post_id=str(post.id),
            owner_id=str(ctx.active_owner_id),
            project_id=str(project_id) if project_id else None,
            event_id=str(event_id) if event_id else None,
        )
        return post

    async def get_post(self, post_id: UUID) -> PostModel:
        post = await self.posts.get(post_id)
        if post is None:
            raise NotFound("Post not found")
        return post

    async def list_posts(
        self,
        owner_id: UUID | None = None,
        project_id: UUID | None = None,
        event_id: UUID | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[PostModel]:
        limit, offset = _page(limit, offset)
        return await self.posts.list_filtered(
            owner_id=owner_id,
            project_id=project_id,
            event_id=event_id,
            limit=limit,
            offset=offset,
        )

    async def update_post(self, ctx: SessionContext, post_id: UUID, **changes: Any) -> PostModel:
        changes = _pick(changes, POST_FIELDS)
        if "content" in changes and (not changes["content"] or not changes["content"].strip()):
            raise BadRequest("Post content is required")
        async with unit_of_work(self._session):
            post = await self.posts.get_for_update(post_id)
            if post is None:
                raise NotFound("Post not found")
            authorize_mutation(ctx, post.owner_id)
            await self.posts.update(post, **changes)
        return post

    async def delete_post(self, ctx: SessionContext, post_id: UUID) -> None:
        async with unit_of_work(self._session):
            post = await self.posts.get_for_update(post_id)
            if post is None:
                raise NotFound("Post not found")
            authorize_mutation(ctx, post.owner_id)
            await self.posts.delete(post)
        log.info("post_deleted", post_id=str(post_id), owner_id=str(ctx.active_owner_id))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _check_schedule(starts_at: datetime | None, ends_at: datetime | None) -> None:
        if starts_at is None or ends_at is None:
            return
        # SQLite hands back naive datetimes
        if starts_at.tzinfo is None:
            starts_at = starts_at.replace(tzinfo=UTC)
        if ends_at.tzinfo is None:
            ends_at = ends_at.replace(tzinfo=UTC)
        if ends_at < starts_at:
            raise BadRequest("An event cannot end before it starts")

    async def _release_media(self, owner_id: UUID, kind: str, content_id: UUID) -> None:
        # the rows are already gone, so a failure here only leaves orphaned files
        try:
            await self._media.release(owner_id, kind, content_id)
        except Exception:
            log.warning(
                "media_release_failed",
                owner_id=str(owner_id),
                kind=kind,
                content_id=str(content_id),
                exc_info=True,
            )
