"""Event endpoints, including posts published under an event."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, Response

from project_library_service.auth.deps import SessionContextDep
from project_library_service.db.models import EventModel
from project_library_service.domain.identity import describe_owner
from project_library_service.rest.routes.posts import post_to_schema
from project_library_service.rest.schemas import (
    EventCreateRequest,
    EventListResponse,
    EventSchema,
    EventUpdateRequest,
    ParentPostCreateRequest,
    PostListResponse,
    PostSchema,
    identity_to_schema,
)
from project_library_service.services.deps import ContentServiceDep

router = APIRouter(prefix="/events")


def _event_to_schema(event: EventModel) -> EventSchema:
    return EventSchema(
        id=str(event.id),
        owner_id=str(event.owner_id),
        owner=identity_to_schema(describe_owner(event.owner)) if event.owner else None,
        title=event.title,
        description=event.description or "",
        location=event.location,
        starts_at=event.starts_at,
        ends_at=event.ends_at,
        tags=event.tags or [],
        created_at=event.created_at,
        updated_at=event.updated_at,
    )


@router.post("", response_model=EventSchema, status_code=201)
async def create_event(
    request: EventCreateRequest, ctx: SessionContextDep, content: ContentServiceDep
) -> EventSchema:
    event = await content.create_event(ctx, **request.model_dump())
    return _event_to_schema(event)


@router.get("", response_model=EventListResponse)
async def list_events(
    content: ContentServiceDep,
    owner_id: UUID | None = None,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> EventListResponse:
    events, total = await content.list_events(owner_id=owner_id, limit=limit, offset=offset)
    return EventListResponse(events=[_event_to_schema(e) for e in events], total=total)


@router.get("/{event_id}", response_model=EventSchema)
async def get_event(event_id: UUID, content: ContentServiceDep) -> EventSchema:
    return _event_to_schema(await content.get_event(event_id))


@router.patch("/{event_id}", response_model=EventSchema)
async def update_event(
    event_id: UUID,
    request: EventUpdateRequest,
    ctx: SessionContextDep,
    content: ContentServiceDep,
) -> EventSchema:
    event = await content.update_event(ctx, event_id, **request.model_dump(exclude_unset=True))
    return _event_to_schema(event)


@router.delete("/{event_id}", status_code=204)
async def delete_event(event_id: UUID, ctx: SessionContextDep, content: ContentServiceDep) -> Response:
    await content.delete_event(ctx, event_id)
    return Response(status_code=204)


@router.get("/{event_id}/posts", response_model=PostListResponse)
async def list_event_posts(
    event_id: UUID,
    content: ContentServiceDep,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> PostListResponse:
    await content.get_event(event_id)
    posts = await content.list_posts(event_id=event_id, limit=limit, offset=offset)
    return PostListResponse(posts=[post_to_schema(p) for p in posts])


@router.post("/{event_id}/posts", response_model=PostSchema, status_code=201)
async def create_event_post(
    event_id: UUID,
    request: ParentPostCreateRequest,
    ctx: SessionContextDep,
    content: ContentServiceDep,
) -> PostSchema:
    post = await content.create_post(
        ctx,
        content=request.content,
        title=request.title,
        event_id=event_id,
        tags=request.tags,
    )
    return post_to_schema(post)
